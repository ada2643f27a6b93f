from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.gameplan.gameplan.container import build_container
from src.gameplan.gameplan.core.exceptions import ValidationError

DEMO_PASSWORD = "gameplan1"


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        progress_store_dir=settings.PROGRESS_STORE_DIR,
        default_fence=settings.DEFAULT_FENCE,
        mail=settings.MAIL_CONFIG,
    )

    try:
        trainer = container.signup_service.sign_up_trainer(
            name="Demo Trainer",
            email="trainer@gameplan.local",
            password=DEMO_PASSWORD,
            confirm_password=DEMO_PASSWORD,
            sport="Football",
        )
    except ValidationError as e:
        print(f"SKIP: {e}")
        return

    student = container.signup_service.sign_up_student(
        {
            "fullName": "Demo Student",
            "age": 16,
            "sport": "Football",
            "gender": "Other",
            "email": "student@gameplan.local",
            "password": DEMO_PASSWORD,
            "confirmPassword": DEMO_PASSWORD,
            "trainerID": trainer.trainer_id,
            "studentID": container.signup_service.generate_student_id(),
        }
    )
    print(f"OK: trainer {trainer.email} (trainerID={trainer.trainer_id}), student {student.email}")


if __name__ == "__main__":
    main()
