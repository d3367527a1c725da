"""Run model: one generation attempt and its payment state."""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from llmsgen.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops the offset)."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class RunState(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    EXPIRED = "expired"


class Run(Base):
    """Generated llms.txt content awaiting (or unlocked by) payment.

    Content never changes after insert. ``paid_at`` is set once by a
    verified payment event. Rows past ``expires_at`` are treated as absent
    and removed by the expiry sweep whether paid or not.
    """

    __tablename__ = "llms_runs"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # Content
    content: Mapped[str] = mapped_column(Text)

    # Lifecycle
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def is_paid(self) -> bool:
        return self.paid_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())

    def state(self, now: datetime | None = None) -> RunState:
        if self.is_expired(now):
            return RunState.EXPIRED
        return RunState.PAID if self.is_paid else RunState.UNPAID
