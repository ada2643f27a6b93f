from __future__ import annotations

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Protocol

from ..attendance.model import AttendanceRecord
from ..core.constants import TASK_CATEGORIES
from ..core.exceptions import ValidationError
from .model import ProgressState, StreakState, TaskItem

TASKS_KEY = "tasks"
ATTENDANCE_KEY = "attendanceDates"
STREAK_KEY = "streak"
LAST_SAVED_DATE_KEY = "lastSavedDate"
STUDENT_DATA_KEY = "studentData"
TRAINER_DATA_KEY = "trainerData"


class KeyValueStore(Protocol):
    """Device-local string store."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class FileKeyValueStore(KeyValueStore):
    """Key-value pairs kept in one JSON file, rewritten atomically on every set."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Local store {self._path.name} is corrupt") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Local store {self._path.name} is corrupt")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = str(value)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self._path.parent), prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


def _load_object(raw: Optional[str], key: str) -> dict:
    """Decode a stored JSON object; missing or empty values load as ``{}``."""
    if raw is None or raw == "":
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Stored {key} is not valid JSON") from e
    if not isinstance(data, dict):
        raise ValidationError(f"Stored {key} is not a JSON object")
    return data


class ProgressStore:
    """Typed access to tasks, attendance dates, streak and last saved date."""

    def __init__(self, kv: KeyValueStore):
        self._kv = kv

    def load_tasks(self) -> dict[str, list[TaskItem]]:
        raw = _load_object(self._kv.get(TASKS_KEY), TASKS_KEY)
        tasks: dict[str, list[TaskItem]] = {c: [] for c in TASK_CATEGORIES}
        for category, items in raw.items():
            items = items or []
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                raise ValidationError(f"Stored tasks for {category} are malformed")
            tasks[category] = [TaskItem.from_document(i) for i in items]
        return tasks

    def save_tasks(self, tasks: dict[str, list[TaskItem]]) -> None:
        payload = {category: [t.to_document() for t in items] for category, items in tasks.items()}
        self._kv.set(TASKS_KEY, json.dumps(payload))

    def load_attendance(self) -> dict[str, AttendanceRecord]:
        raw = _load_object(self._kv.get(ATTENDANCE_KEY), ATTENDANCE_KEY)
        records: dict[str, AttendanceRecord] = {}
        for day, entry in raw.items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise ValidationError(f"Stored attendance for {day} is malformed")
            records[day] = AttendanceRecord.from_document(day, entry)
        return records

    def save_attendance(self, records: dict[str, AttendanceRecord]) -> None:
        payload = {day: r.to_document() for day, r in records.items()}
        self._kv.set(ATTENDANCE_KEY, json.dumps(payload))

    def load_streak(self) -> StreakState:
        raw_streak = self._kv.get(STREAK_KEY)
        try:
            streak = int(raw_streak) if raw_streak else 0
        except ValueError as e:
            raise ValidationError("Stored streak is not a number") from e
        return StreakState(streak=max(0, streak), last_saved_date=self._kv.get(LAST_SAVED_DATE_KEY) or "")

    def save_streak(self, streak: int) -> None:
        self._kv.set(STREAK_KEY, str(int(streak)))

    def save_last_saved_date(self, day: str) -> None:
        self._kv.set(LAST_SAVED_DATE_KEY, day)

    def load_state(self) -> ProgressState:
        return ProgressState(tasks=self.load_tasks(), attendance=self.load_attendance(), streak=self.load_streak())

    # Last known profile documents, read back when the backend is unreachable.

    def load_student_data(self) -> dict:
        return _load_object(self._kv.get(STUDENT_DATA_KEY), STUDENT_DATA_KEY)

    def save_student_data(self, data: dict) -> None:
        self._kv.set(STUDENT_DATA_KEY, json.dumps(data))

    def load_trainer_data(self) -> dict:
        return _load_object(self._kv.get(TRAINER_DATA_KEY), TRAINER_DATA_KEY)

    def save_trainer_data(self, data: dict) -> None:
        self._kv.set(TRAINER_DATA_KEY, json.dumps(data))


LocalStoreFactory = Callable[[str], ProgressStore]


def store_file_name(uid: str) -> str:
    """File name for a user's store; distinct uids never share a file."""
    return hashlib.sha256(str(uid).encode("utf-8")).hexdigest() + ".json"


def file_store_factory(root_dir: str | Path) -> LocalStoreFactory:
    """One store file per signed-in user under ``root_dir``."""
    root = Path(root_dir)

    def _for(uid: str) -> ProgressStore:
        return ProgressStore(FileKeyValueStore(root / store_file_name(uid)))

    return _for
