from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import date_key, now_utc
from ..common.validators import require_non_empty
from ..core.constants import TASK_CATEGORIES
from ..core.enums import Role
from ..core.exceptions import BackendUnreachableError, IncompleteTasksError, PermissionDeniedError, ValidationError
from ..logging_config import get_logger
from ..users.model import SessionContext
from ..users.repository import StudentRepository
from .model import ProgressState, SaveResult, TaskId, TaskItem
from .store import LocalStoreFactory

logger = get_logger(__name__)

SYNC_NOTICE = "Saved on this device only; it will not show for your trainer until the server is reachable."


class ProgressService:
    """Use cases: task checklist and daily streak of a student."""

    def __init__(self, students: StudentRepository, local_store_for: LocalStoreFactory):
        self._students = students
        self._local_store_for = local_store_for

    def get_state(self, ctx: SessionContext) -> ProgressState:
        ctx.require_role(Role.STUDENT)
        return self._local_store_for(ctx.uid).load_state()

    def add_task(self, ctx: SessionContext, *, category: str, name: str) -> TaskItem:
        ctx.require_role(Role.STUDENT)
        if category not in TASK_CATEGORIES:
            raise ValidationError(f"Unknown task category: {category}")
        name = require_non_empty(name, "Task name")

        store = self._local_store_for(ctx.uid)
        tasks = store.load_tasks()
        numeric_ids = [int(t.id) for items in tasks.values() for t in items if str(t.id).isdigit()]
        task = TaskItem(id=max(numeric_ids, default=0) + 1, name=name)
        tasks.setdefault(category, []).append(task)

        store.save_tasks(tasks)
        self._mirror(ctx, {"tasks": _tasks_document(tasks)})
        return task

    def toggle_task(self, ctx: SessionContext, *, category: str, task_id: TaskId) -> TaskItem:
        ctx.require_role(Role.STUDENT)
        store = self._local_store_for(ctx.uid)
        tasks = store.load_tasks()

        items = tasks.get(category)
        if items is None:
            raise ValidationError(f"Unknown task category: {category}")

        for index, task in enumerate(items):
            if str(task.id) == str(task_id):
                toggled = replace(task, completed=not task.completed)
                items[index] = toggled
                break
        else:
            raise ValidationError("Task not found")

        store.save_tasks(tasks)
        self._mirror(ctx, {"tasks": _tasks_document(tasks)})
        return toggled

    def save_progress(self, ctx: SessionContext, *, now: Optional[datetime] = None) -> SaveResult:
        ctx.require_role(Role.STUDENT)
        today = date_key(now or now_utc())
        store = self._local_store_for(ctx.uid)
        state = store.load_state()

        if state.streak.last_saved_date == today:
            return SaveResult(streak=state.streak.streak, last_saved_date=today, incremented=False)

        if not state.all_tasks_completed:
            raise IncompleteTasksError("Complete all tasks to save progress.")

        streak = state.streak.streak + 1
        store.save_streak(streak)
        store.save_last_saved_date(today)
        logger.info("Streak for %s advanced to %s on %s", ctx.uid, streak, today)

        notice = self._mirror(ctx, {"streak": streak})
        return SaveResult(streak=streak, last_saved_date=today, incremented=True, synced=notice is None, notice=notice)

    def reset_streak(self, ctx: SessionContext) -> SaveResult:
        """Set the streak to 0.

        lastSavedDate is left as is, so saving again on the same day stays a
        no-op and does not bring the streak back to 1.
        """
        ctx.require_role(Role.STUDENT)
        store = self._local_store_for(ctx.uid)
        last_saved = store.load_streak().last_saved_date

        store.save_streak(0)
        logger.info("Streak for %s reset", ctx.uid)

        notice = self._mirror(ctx, {"streak": 0})
        return SaveResult(streak=0, last_saved_date=last_saved, incremented=False, synced=notice is None, notice=notice)

    def _mirror(self, ctx: SessionContext, fields: dict) -> Optional[str]:
        try:
            self._students.update_fields(ctx.uid, fields)
        except (BackendUnreachableError, PermissionDeniedError) as e:
            logger.warning("Remote mirror of %s for %s failed: %s", sorted(fields), ctx.uid, e)
            return SYNC_NOTICE
        return None


def _tasks_document(tasks: dict[str, list[TaskItem]]) -> dict:
    return {category: [t.to_document() for t in items] for category, items in tasks.items()}
