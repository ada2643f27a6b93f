from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..attendance.model import AttendanceRecord

TaskId = Union[int, str]


@dataclass(frozen=True)
class TaskItem:
    id: TaskId
    name: str
    completed: bool = False

    def to_document(self) -> dict:
        return {"id": self.id, "name": self.name, "completed": self.completed}

    @classmethod
    def from_document(cls, data: dict) -> "TaskItem":
        return cls(id=data.get("id"), name=str(data.get("name") or ""), completed=bool(data.get("completed", False)))


@dataclass(frozen=True)
class StreakState:
    streak: int = 0
    last_saved_date: str = ""


@dataclass(frozen=True)
class ProgressState:
    tasks: dict[str, list[TaskItem]] = field(default_factory=dict)
    attendance: dict[str, AttendanceRecord] = field(default_factory=dict)
    streak: StreakState = field(default_factory=StreakState)

    @property
    def all_tasks_completed(self) -> bool:
        # No tasks at all counts as completed.
        return all(task.completed for items in self.tasks.values() for task in items)


@dataclass(frozen=True)
class SaveResult:
    streak: int
    last_saved_date: str
    incremented: bool
    synced: bool = True
    notice: Optional[str] = None
