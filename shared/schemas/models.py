"""
Data models for the schedule read path.

Defines the flat, fully-resolved records handed out by the query
layer. Records are built once from a store row and never refer back
to the store, so they stay readable after the connection is gone.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple, Mapping
from datetime import date, datetime, timezone
from enum import Enum

from shared.utils.errors import ProjectionError


class RecurrenceKind(Enum):
    """How a scheduling event repeats."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Columns every projected row must carry, in record order
PROJECTION_COLUMNS = (
    "id",
    "group_id",
    "group_name",
    "owner_id",
    "owner_name",
    "title",
    "starts_at",
    "ends_at",
    "is_fixed",
    "location",
    "attendees",
    "notes",
    "recurrence_kind",
    "recurrence_end_date",
    "created_at",
    "updated_at",
)


def _zoned(value: datetime, column: str) -> datetime:
    if not isinstance(value, datetime):
        raise ProjectionError(f"Column {column} is not a timestamp", column=column)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class ScheduleEvent:
    """Scheduling event with its group and owner resolved to scalars."""
    id: int
    group_id: int
    group_name: str
    owner_id: Optional[int]
    owner_name: Optional[str]
    title: str
    starts_at: datetime
    ends_at: datetime
    is_fixed: bool = False
    location: Optional[str] = None
    attendees: Tuple[str, ...] = field(default_factory=tuple)
    notes: Optional[str] = None
    recurrence_kind: RecurrenceKind = RecurrenceKind.NONE
    recurrence_end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON response shape."""
        return {
            "id": self.id,
            "groupId": self.group_id,
            "groupName": self.group_name,
            "ownerId": self.owner_id,
            "ownerName": self.owner_name,
            "title": self.title,
            "startsAt": self.starts_at.isoformat(),
            "endsAt": self.ends_at.isoformat(),
            "fixed": self.is_fixed,
            "location": self.location,
            "attendees": list(self.attendees),
            "notes": self.notes,
            "recurrenceKind": self.recurrence_kind.value,
            "recurrenceEndDate": self.recurrence_end_date.isoformat() if self.recurrence_end_date else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ScheduleEvent":
        """
        Build a record from one projected result row.

        Raises:
            ProjectionError: if the row is missing a column or holds a
                value that cannot be represented on the record.
        """
        missing = [column for column in PROJECTION_COLUMNS if column not in row]
        if missing:
            raise ProjectionError(
                f"Projected row is missing columns: {', '.join(missing)}",
                column=missing[0],
                details={"missing": missing},
            )

        for column in ("id", "group_id", "group_name", "title", "starts_at", "ends_at"):
            if row[column] is None:
                raise ProjectionError(f"Column {column} is null", column=column)

        raw_kind = row["recurrence_kind"] or RecurrenceKind.NONE.value
        try:
            recurrence_kind = RecurrenceKind(raw_kind)
        except ValueError:
            raise ProjectionError(
                f"Unknown recurrence kind: {raw_kind}",
                column="recurrence_kind",
                details={"value": str(raw_kind)},
            ) from None

        created_at = row["created_at"]
        updated_at = row["updated_at"]

        return cls(
            id=int(row["id"]),
            group_id=int(row["group_id"]),
            group_name=str(row["group_name"]),
            owner_id=int(row["owner_id"]) if row["owner_id"] is not None else None,
            owner_name=str(row["owner_name"]) if row["owner_name"] is not None else None,
            title=str(row["title"]),
            starts_at=_zoned(row["starts_at"], "starts_at"),
            ends_at=_zoned(row["ends_at"], "ends_at"),
            is_fixed=bool(row["is_fixed"]),
            location=row["location"],
            attendees=tuple(row["attendees"] or ()),
            notes=row["notes"],
            recurrence_kind=recurrence_kind,
            recurrence_end_date=row["recurrence_end_date"],
            created_at=_zoned(created_at, "created_at") if created_at is not None else None,
            updated_at=_zoned(updated_at, "updated_at") if updated_at is not None else None,
        )
