import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file from the project root
# This file: src/inflow/config/settings.py
SERVER_ROOT = Path(__file__).resolve().parent.parent.parent.parent
ENV_PATH = SERVER_ROOT / ".env"

if ENV_PATH.exists():
    load_dotenv(ENV_PATH)
else:
    # Fallback to simple load_dotenv which looks in cwd
    load_dotenv()


class Settings(BaseModel):
    """Global Application Settings"""

    # Environment
    ENV: str = Field(default="development", description="Environment: development, production, testing")
    LOG_LEVEL: str = Field(default="INFO", description="Log level")

    # Project Paths
    ROOT_DIR: Path = Field(default=SERVER_ROOT, description="Project root directory")
    WORKFLOWS_DIR: str = Field(default="workflows", description="Directory of <workflow_id>.json files")

    # Durable step log
    STEP_LOG_PATH: str = Field(default="storage/steps.db", description="Path to the SQLite execution log")

    # Step retry policy
    RETRY_MAX_ATTEMPTS: int = Field(default=3, ge=1, description="Attempts per step, including the first")
    RETRY_BASE_DELAY: float = Field(default=1.0, ge=0, description="Initial backoff delay (seconds)")
    RETRY_MAX_DELAY: float = Field(default=60.0, ge=0, description="Backoff delay cap (seconds)")

    # Executors
    HTTP_TIMEOUT: float = Field(default=30.0, gt=0, description="HTTP Request node timeout (seconds)")

    # Model API Keys
    OPENAI_API_KEY: Optional[str] = Field(default=None, description="OpenAI API Key")
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None, description="Anthropic API Key")
    GOOGLE_API_KEY: Optional[str] = Field(default=None, description="Google Generative AI API Key")

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True
    }


def load_settings() -> Settings:
    """Load settings from environment variables."""
    return Settings(
        ENV=os.getenv("ENV", "development"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        ROOT_DIR=SERVER_ROOT,
        WORKFLOWS_DIR=os.getenv("WORKFLOWS_DIR", str(SERVER_ROOT / "workflows")),
        STEP_LOG_PATH=os.getenv("STEP_LOG_PATH", str(SERVER_ROOT / "storage/steps.db")),
        RETRY_MAX_ATTEMPTS=int(os.getenv("RETRY_MAX_ATTEMPTS", "3")),
        RETRY_BASE_DELAY=float(os.getenv("RETRY_BASE_DELAY", "1.0")),
        RETRY_MAX_DELAY=float(os.getenv("RETRY_MAX_DELAY", "60.0")),
        HTTP_TIMEOUT=float(os.getenv("HTTP_TIMEOUT", "30.0")),
        OPENAI_API_KEY=os.getenv("OPENAI_API_KEY"),
        ANTHROPIC_API_KEY=os.getenv("ANTHROPIC_API_KEY"),
        GOOGLE_API_KEY=os.getenv("GOOGLE_API_KEY"),
    )


# Global settings instance
settings = load_settings()
