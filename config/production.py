import os

from .config import Config, db_config_from, mail_config_from

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from(Config)
MAIL_CONFIG = mail_config_from(Config)

PROGRESS_STORE_DIR = Config.PROGRESS_STORE_DIR
DEFAULT_FENCE = Config.DEFAULT_FENCE

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
LOG_JSON = bool(int(os.getenv("LOG_JSON", "1")))

AUTO_INIT_DB = Config.AUTO_INIT_DB
