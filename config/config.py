import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "gameplan-dev-secret"

    # Hosted backend (MySQL document store + accounts)
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "gameplan_db")

    # Device-local progress files, one per signed-in user
    PROGRESS_STORE_DIR = os.environ.get("PROGRESS_STORE_DIR", "instance/progress")

    # Bootstrap fence used until a trainer sets a location
    DEFAULT_FENCE = {
        "latitude": float(os.environ.get("DEFAULT_FENCE_LATITUDE", "56.1971946")),
        "longitude": float(os.environ.get("DEFAULT_FENCE_LONGITUDE", "15.6188414")),
        "radius": float(os.environ.get("DEFAULT_FENCE_RADIUS", "1000")),
    }

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_JSON = bool(int(os.environ.get("LOG_JSON", "0")))

    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))

    # Password reset delivery; without MAIL_HOST the reset link is only logged
    MAIL_HOST = os.environ.get("MAIL_HOST", "")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", "587"))
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD", "")
    MAIL_USE_TLS = bool(int(os.environ.get("MAIL_USE_TLS", "1")))
    MAIL_FROM = os.environ.get("MAIL_FROM", "no-reply@gameplan.local")
    PASSWORD_RESET_URL = os.environ.get("PASSWORD_RESET_URL", "http://localhost:5000/reset-password")


def db_config_from(cls=Config) -> dict:
    return {
        "host": cls.DB_HOST,
        "port": cls.DB_PORT,
        "user": cls.DB_USER,
        "password": cls.DB_PASSWORD,
        "database": cls.DB_NAME,
    }


def mail_config_from(cls=Config) -> dict:
    return {
        "host": cls.MAIL_HOST,
        "port": cls.MAIL_PORT,
        "username": cls.MAIL_USERNAME,
        "password": cls.MAIL_PASSWORD,
        "use_tls": cls.MAIL_USE_TLS,
        "from_email": cls.MAIL_FROM,
        "reset_url": cls.PASSWORD_RESET_URL,
    }
