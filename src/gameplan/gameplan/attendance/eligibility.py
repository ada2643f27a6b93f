from __future__ import annotations

from ..core.constants import CERTIFICATION_RATIO, ENOUGH_ATTENDANCE_RATIO
from .model import AttendanceSummary


def attendance_rate(total_classes: float, attended_classes: float) -> float:
    """Attended share of classes; 0.0 when no classes were held."""
    if not total_classes or total_classes <= 0:
        return 0.0
    return attended_classes / total_classes


def has_attended_enough_classes(total_classes: float, attended_classes: float) -> bool:
    if not total_classes or total_classes <= 0:
        return False
    return attended_classes / total_classes >= ENOUGH_ATTENDANCE_RATIO


def is_eligible_for_certification(total_classes: float, attended_classes: float) -> bool:
    if not total_classes or total_classes <= 0:
        return False
    return attended_classes / total_classes >= CERTIFICATION_RATIO


def summarize_attendance(total_classes: float, attended_classes: float) -> AttendanceSummary:
    return AttendanceSummary(
        total_classes=total_classes,
        attended_classes=attended_classes,
        rate=round(attendance_rate(total_classes, attended_classes), 4),
        has_attended_enough=has_attended_enough_classes(total_classes, attended_classes),
        eligible_for_certification=is_eligible_for_certification(total_classes, attended_classes),
    )
