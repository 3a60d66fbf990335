"""Stateful, session-driven task graphs for multi-step workflows."""

__version__ = "0.1.0"