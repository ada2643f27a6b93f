import os

from .config import Config, db_config_from, mail_config_from

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from(Config)
MAIL_CONFIG = mail_config_from(Config)

PROGRESS_STORE_DIR = os.getenv("PROGRESS_STORE_DIR", "instance/test-progress")
DEFAULT_FENCE = Config.DEFAULT_FENCE

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
LOG_JSON = False

AUTO_INIT_DB = False
