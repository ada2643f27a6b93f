from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Attendance for one calendar date.

    A record exists only when attendance was explicitly marked; a missing
    date means "not marked", never "absent".
    """

    date_key: str
    marked: bool = True
    timestamp: Optional[str] = None

    def to_document(self) -> dict:
        data: dict = {"marked": self.marked}
        if self.timestamp:
            data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_document(cls, date_key: str, data: dict) -> "AttendanceRecord":
        return cls(date_key=date_key, marked=bool(data.get("marked", False)), timestamp=data.get("timestamp"))


@dataclass(frozen=True)
class MarkResult:
    record: AttendanceRecord
    synced: bool
    notice: Optional[str] = None


@dataclass(frozen=True)
class AttendanceSummary:
    total_classes: float
    attended_classes: float
    rate: float
    has_attended_enough: bool
    eligible_for_certification: bool
