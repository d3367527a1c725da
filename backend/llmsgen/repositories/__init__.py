"""Repository implementations for data access."""

from llmsgen.repositories.postgres import PostgresRunRepository, coerce_run_id

__all__ = [
    "PostgresRunRepository",
    "coerce_run_id",
]
