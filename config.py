import os
from dotenv import load_dotenv
load_dotenv()


def _flag(name, default):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///incubator.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PORT = int(os.getenv("PORT", "5001"))
    # public frontend, used for links in emails
    APP_URL = os.getenv("APP_URL", "http://localhost:3000")

    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    RQ_ENABLED = _flag("RQ_ENABLED", "true")

    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
    MAIL_FROM = os.getenv("MAIL_FROM", "noreply@example.com")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "Nirmaan Pre-Incubation")
    NOTIFY_TIMEOUT_SECONDS = int(os.getenv("NOTIFY_TIMEOUT_SECONDS", "15"))

    REVIEWER_INVITE_EXPIRE_DAYS = int(os.getenv("REVIEWER_INVITE_EXPIRE_DAYS", "2"))
    REVIEWER_INVITE_SWEEP_INTERVAL_SECONDS = int(os.getenv("REVIEWER_INVITE_SWEEP_INTERVAL_SECONDS", "3600"))
    SWEEP_ON_STARTUP = _flag("SWEEP_ON_STARTUP", "true")

    AUTH_TOKEN_TTL_HOURS = int(os.getenv("AUTH_TOKEN_TTL_HOURS", "168"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RQ_ENABLED = False
    SWEEP_ON_STARTUP = False
    SENDGRID_API_KEY = None
