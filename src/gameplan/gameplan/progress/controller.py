from __future__ import annotations

from flask import Flask

from ..container import Container
from ..web import current_context, json_body, json_ok, login_required
from .model import ProgressState, SaveResult


def _state_payload(state: ProgressState) -> dict:
    return {
        "tasks": {category: [t.to_document() for t in items] for category, items in state.tasks.items()},
        "streak": state.streak.streak,
        "lastSavedDate": state.streak.last_saved_date,
        "allTasksCompleted": state.all_tasks_completed,
    }


def _save_payload(result: SaveResult, message: str) -> dict:
    payload = {
        "message": message,
        "streak": result.streak,
        "lastSavedDate": result.last_saved_date,
        "incremented": result.incremented,
        "synced": result.synced,
    }
    if result.notice:
        payload["notice"] = result.notice
    return payload


def register(app: Flask, container: Container) -> None:
    @app.route("/api/progress", methods=["GET"], endpoint="progress")
    @login_required
    def progress():
        state = container.progress_service.get_state(current_context(container))
        return json_ok(_state_payload(state))

    @app.route("/api/progress/tasks", methods=["POST"], endpoint="add_task")
    @login_required
    def add_task():
        data = json_body()
        task = container.progress_service.add_task(
            current_context(container),
            category=str(data.get("category", "")),
            name=str(data.get("name", "")),
        )
        return json_ok({"task": task.to_document()}, 201)

    @app.route("/api/progress/tasks/<category>/<task_id>/toggle", methods=["POST"], endpoint="toggle_task")
    @login_required
    def toggle_task(category: str, task_id: str):
        task = container.progress_service.toggle_task(current_context(container), category=category, task_id=task_id)
        return json_ok({"task": task.to_document()})

    @app.route("/api/progress/save", methods=["POST"], endpoint="save_progress")
    @login_required
    def save_progress():
        result = container.progress_service.save_progress(current_context(container))
        return json_ok(_save_payload(result, "Progress saved successfully!"))

    @app.route("/api/progress/reset", methods=["POST"], endpoint="reset_streak")
    @login_required
    def reset_streak():
        result = container.progress_service.reset_streak(current_context(container))
        return json_ok(_save_payload(result, "Your streak has been reset to 0."))
