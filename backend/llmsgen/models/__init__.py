"""SQLAlchemy models."""

from llmsgen.models.run import Run, RunState

__all__ = [
    "Run",
    "RunState",
]
