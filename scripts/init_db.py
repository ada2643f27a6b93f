from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.gameplan.gameplan.database.bootstrap import apply_schema, list_tables
from src.gameplan.gameplan.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = DBConfig.from_dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.user}@{db_config.host}:{db_config.port}/{db_config.database} "
        f"(tables={', '.join(sorted(tables))})"
    )


if __name__ == "__main__":
    main()
