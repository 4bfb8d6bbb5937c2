# ==========================================================================================================
# -------------- Configuration file for the NMSystem commission application -------------------------------
# ==========================================================================================================
import os
from decimal import Decimal
from dotenv import load_dotenv


if os.environ.get("FLASK_ENV") != "production":
    load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:

    SECRET_KEY = os.getenv("SECRET_KEY")
    if not SECRET_KEY:
        raise ValueError("SECRET_KEY must be set in production")

    FLASK_ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = os.getenv("DEBUG", "False").lower() in ("true", "1", "t")

    _database_url = os.getenv("DATABASE_URL")
    if not _database_url:
        _database_url = f"sqlite:///{os.path.join(basedir, 'instance', 'nmsystem.db')}"

    if _database_url.startswith("postgres://"):
        _database_url = _database_url.replace("postgres://", "postgresql://", 1)

    SQLALCHEMY_DATABASE_URI = _database_url
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    LOG_DIR = os.getenv("LOG_DIR", "logs")

    # Commission engine
    COMMISSION_MAX_LEVEL = int(os.getenv("COMMISSION_MAX_LEVEL", "20"))
    COMMISSION_REJECT_DUPLICATES = os.getenv("COMMISSION_REJECT_DUPLICATES", "False").lower() in ("true", "1", "t")

    # Activity policy
    ACTIVITY_PERIOD_DAYS = int(os.getenv("ACTIVITY_PERIOD_DAYS", "30"))

    # 1 reward point per 100 spent
    REWARD_POINTS_RATE = Decimal(os.getenv("REWARD_POINTS_RATE", "0.01"))


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    COMMISSION_REJECT_DUPLICATES = False
