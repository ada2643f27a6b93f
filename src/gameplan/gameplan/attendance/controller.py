from __future__ import annotations

from flask import Flask, request, session

from ..container import Container
from ..core.exceptions import ValidationError
from ..geo.provider import ReportedLocationProvider
from ..web import current_context, json_body, json_ok, login_required
from .eligibility import summarize_attendance


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="mark_attendance")
    @login_required
    def mark_attendance():
        provider = ReportedLocationProvider.from_payload(json_body())
        result = container.attendance_service.mark_attendance(current_context(container), provider)

        payload = {
            "message": "Attendance marked successfully!",
            "date": result.record.date_key,
            "timestamp": result.record.timestamp,
            "synced": result.synced,
        }
        if result.notice:
            payload["notice"] = result.notice
        return json_ok(payload, 201)

    @app.route("/api/attendance/calendar", methods=["GET"], endpoint="attendance_calendar")
    @login_required
    def attendance_calendar():
        ctx = current_context(container)
        student_uid = request.args.get("student")
        if student_uid:
            calendar = container.attendance_service.fetch_remote_calendar(ctx, student_uid)
        else:
            calendar = container.attendance_service.get_calendar(ctx)
        return json_ok({"markedDates": calendar})

    @app.route("/api/attendance/eligibility", methods=["GET"], endpoint="attendance_eligibility")
    def attendance_eligibility():
        total = request.args.get("total", type=float)
        attended = request.args.get("attended", type=float)
        if total is None or (attended is None and "uid" not in session):
            raise ValidationError("total and attended are required numbers")

        if attended is None:
            # Signed-in student: count the days marked on this device.
            summary = container.attendance_service.get_summary(current_context(container), total_classes=total)
        else:
            summary = summarize_attendance(total, attended)
        return json_ok(
            {
                "rate": summary.rate,
                "hasAttendedEnoughClasses": summary.has_attended_enough,
                "isEligibleForCertification": summary.eligible_for_certification,
            }
        )
