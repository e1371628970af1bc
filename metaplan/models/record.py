"""
The remote record that holds one user's document.

A record is keyed by the user identifier and carries the serialized
AppData payload plus denormalized date fields (date, year, month, day,
week) refreshed on every create/replace. The date fields are for people
browsing the store; nothing reads them back.

PlanRecord is the backend-neutral value every store returns.
PlanRecordRow is its SQLAlchemy table for the SQL store.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from metaplan.models.base import Base

INFO_FIELDS: tuple[str, ...] = ("date", "year", "month", "day", "week")


@dataclass(frozen=True)
class PlanRecord:
    """One stored document as returned by a RemoteStore."""

    record_id: str
    user_id: str
    payload: str | None
    info: dict[str, str] = field(default_factory=dict)


class PlanRecordRow(Base):
    """
    SQL table for plan records.

    Attributes:
        pk: Surrogate primary key
        record_id: "{user_id}_{epoch millis}" assigned at creation
        user_id: Session identifier (lookup key)
        corevalue: Serialized AppData JSON (same column name as the
            sheet-backed store)
        date/year/month/day/week: Bookkeeping fields
        updated_at: Last write timestamp
    """

    __tablename__ = "plan_records"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    record_id = Column(String(255), nullable=False, unique=True)
    user_id = Column(String(255), nullable=False, index=True)
    corevalue = Column(Text, nullable=True)

    date = Column(String(10), nullable=True)
    year = Column(String(4), nullable=True)
    month = Column(String(2), nullable=True)
    day = Column(String(9), nullable=True)
    week = Column(String(10), nullable=True)

    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (Index("idx_plan_record_user", "user_id", "pk"),)

    def to_record(self) -> PlanRecord:
        return PlanRecord(
            record_id=str(self.record_id),
            user_id=str(self.user_id),
            payload=self.corevalue,
            info={
                name: str(getattr(self, name))
                for name in INFO_FIELDS
                if getattr(self, name) is not None
            },
        )

    def __repr__(self) -> str:
        return f"<PlanRecordRow(record_id={self.record_id}, user_id={self.user_id})>"


__all__ = ["INFO_FIELDS", "PlanRecord", "PlanRecordRow"]
