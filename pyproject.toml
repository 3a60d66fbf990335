[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "graphflow"
version = "0.1.0"
description = "Stateful, session-driven task graphs for conversational and multi-step workflows"
requires-python = ">=3.10"
dependencies = []
keywords = ["workflow", "graph", "tasks", "sessions", "chat", "state machine", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
graphflow-greeting = "graphflow.greeting:main"
graphflow-client = "graphflow.client:main"

[tool.hatch.build.targets.wheel]
packages = ["graphflow"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
