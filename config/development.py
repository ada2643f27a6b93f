import os

from .config import Config, db_config_from, mail_config_from

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from(Config)
MAIL_CONFIG = mail_config_from(Config)

PROGRESS_STORE_DIR = Config.PROGRESS_STORE_DIR
DEFAULT_FENCE = Config.DEFAULT_FENCE

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()
LOG_JSON = False

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
