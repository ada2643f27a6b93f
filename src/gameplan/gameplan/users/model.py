from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..core.constants import DEFAULT_PROFILE_IMAGE
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..geo.model import GeofenceConfig


@dataclass(frozen=True)
class TrainerProfile:
    """Trainer document (``trainers/<uid>``)."""

    uid: str
    name: str
    email: str
    trainer_id: str
    sport: str = ""
    location: Optional[GeofenceConfig] = None

    @property
    def fence(self) -> GeofenceConfig:
        return self.location or GeofenceConfig.from_document(None)

    def to_document(self) -> dict:
        data = {
            "name": self.name,
            "email": self.email,
            "trainerID": self.trainer_id,
            "sport": self.sport,
        }
        if self.location:
            data["location"] = self.location.to_document()
        return data

    @classmethod
    def from_document(cls, uid: str, data: dict) -> "TrainerProfile":
        location = data.get("location")
        return cls(
            uid=uid,
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            trainer_id=str(data.get("trainerID") or uid),
            sport=str(data.get("sport") or ""),
            location=GeofenceConfig.from_document(location) if location else None,
        )


@dataclass(frozen=True)
class StudentProfile:
    """Student document (``students/<uid>``)."""

    uid: str
    name: str
    email: str
    trainer_id: str
    student_id: str
    age: Optional[int] = None
    gender: str = ""
    sport: str = ""
    address: str = ""
    emergency_contact: str = ""
    trainer_name: str = ""
    image: str = DEFAULT_PROFILE_IMAGE
    streak: int = 0
    attendance: dict = field(default_factory=dict)

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "age": self.age,
            "email": self.email,
            "trainerID": self.trainer_id,
            "trainerName": self.trainer_name,
            "studentID": self.student_id,
            "address": self.address,
            "sport": self.sport,
            "gender": self.gender,
            "emergencyContact": self.emergency_contact,
            "image": self.image,
            "streak": self.streak,
        }

    @classmethod
    def from_document(cls, uid: str, data: dict) -> "StudentProfile":
        age = data.get("age")
        try:
            age = int(age) if age not in (None, "") else None
        except (TypeError, ValueError):
            age = None
        return cls(
            uid=uid,
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            trainer_id=str(data.get("trainerID") or ""),
            student_id=str(data.get("studentID") or ""),
            age=age,
            gender=str(data.get("gender") or ""),
            sport=str(data.get("sport") or ""),
            address=str(data.get("address") or ""),
            emergency_contact=str(data.get("emergencyContact") or ""),
            trainer_name=str(data.get("trainerName") or ""),
            image=str(data.get("image") or DEFAULT_PROFILE_IMAGE),
            streak=int(data.get("streak") or 0),
            attendance=dict(data.get("attendance") or {}),
        )


Profile = Union[TrainerProfile, StudentProfile]


@dataclass(frozen=True)
class SessionContext:
    """Signed-in user, passed explicitly to every workflow."""

    uid: str
    role: Role
    email: str
    profile: Profile

    @property
    def is_trainer(self) -> bool:
        return self.role == Role.TRAINER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    def require_role(self, role: Role) -> None:
        if self.role != role:
            raise AuthorizationError(f"Only a {role.value} can do this")
