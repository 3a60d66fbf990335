"""Data kept in the context by the insurance claim workflow."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

__all__ = ["ClaimDetails", "ClaimDecision", "SessionKeys"]


def _require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{kind} must be a mapping")
    return data


def _optional_text(data: Mapping[str, Any], name: str) -> str | None:
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def _required_text(data: Mapping[str, Any], name: str) -> str:
    if name not in data:
        raise ValueError(f"missing field {name}")
    value = data[name]
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


@dataclass
class ClaimDetails:
    """What is known so far about a claim."""

    insurance_type: str | None = None
    description: str | None = None
    estimated_cost: float | None = None
    additional_info: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "insurance_type": self.insurance_type,
            "description": self.description,
            "estimated_cost": self.estimated_cost,
            "additional_info": self.additional_info,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClaimDetails:
        """Build from a mapping; absent fields are None. Raises ValueError on bad types."""
        data = _require_mapping(data, "claim details")
        cost = data.get("estimated_cost")
        if cost is not None:
            if isinstance(cost, bool) or not isinstance(cost, (int, float)):
                raise ValueError("estimated_cost must be a number")
            cost = float(cost)
        return cls(
            insurance_type=_optional_text(data, "insurance_type"),
            description=_optional_text(data, "description"),
            estimated_cost=cost,
            additional_info=_optional_text(data, "additional_info"),
        )


@dataclass
class ClaimDecision:
    """The outcome of validating a claim."""

    approved: bool
    decision_reason: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "approved": self.approved,
            "decision_reason": self.decision_reason,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClaimDecision:
        """Build from a mapping. Raises ValueError on missing or mistyped fields."""
        data = _require_mapping(data, "claim decision")
        if "approved" not in data:
            raise ValueError("missing field approved")
        approved = data["approved"]
        if not isinstance(approved, bool):
            raise ValueError("approved must be a boolean")
        return cls(
            approved=approved,
            decision_reason=_required_text(data, "decision_reason"),
            timestamp=_required_text(data, "timestamp"),
        )


class SessionKeys:
    """Context keys used by the claim workflow."""

    USER_INPUT = "user_input"
    CLAIM_DETAILS = "claim_details"
    CLAIM_DECISION = "claim_decision"
    INSURANCE_TYPE = "insurance_type"
    APPROVAL_STATE = "approval_state"