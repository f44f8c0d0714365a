# skillswap/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _cors_origins() -> list[str]:
    origins = [
        "http://localhost:5173",
        "http://localhost:5174",
    ]
    client_url = os.getenv("CLIENT_URL")
    if client_url:
        origins.append(client_url)  # Deployed frontend
    return origins


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "SkillSwap API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3001"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = _cors_origins()

    # Database
    # Create tables on startup (fine for the bundled SQLite file; use Aerich migrations elsewhere)
    generate_schemas: bool = os.getenv("DB_GENERATE_SCHEMAS", "true").lower() in ("true", "1", "yes")

    # Notification relay
    heartbeat_interval_sec: float = float(os.getenv("HEARTBEAT_INTERVAL_SEC", "30"))

    # Skill registry
    popular_skills_limit: int = int(os.getenv("POPULAR_SKILLS_LIMIT", "20"))

settings = Settings()  # Instantiate configuration
