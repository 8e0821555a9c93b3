import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root (holds .env)
env_path = BASE_DIR / ".env"
load_dotenv(dotenv_path=env_path)


def _flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cuaderno.db")
    SQL_ECHO = _flag("SQL_ECHO", "0")
    RUN_MIGRATIONS = _flag("RUN_MIGRATIONS", "1")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

    # JWT config
    JWT_SECRET = os.getenv("JWT_SECRET", "")
    JWT_ALG = os.getenv("JWT_ALG", "HS256")
    JWT_EXPIRE_MIN = int(os.getenv("JWT_EXPIRE_MIN", 60))

    # Object storage
    STORAGE_ROOT = os.getenv("STORAGE_ROOT", str(BASE_DIR / "storage"))
    STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "study-materials")
    STORAGE_URL_TTL = int(os.getenv("STORAGE_URL_TTL", 60 * 60))
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

    # Mabot chatbot gateway (local overrides in local_settings take precedence)
    MABOT_BASE_URL = os.getenv("MABOT_BASE_URL", "")
    MABOT_USERNAME = os.getenv("MABOT_USERNAME", "")
    MABOT_PASSWORD = os.getenv("MABOT_PASSWORD", "")
    MABOT_BOT_USERNAME = os.getenv("MABOT_BOT_USERNAME", "cuaderbot")
    MABOT_PLATFORM = os.getenv("MABOT_PLATFORM", "web")
    MABOT_TIMEOUT = float(os.getenv("MABOT_TIMEOUT", 60))

settings = Settings()
