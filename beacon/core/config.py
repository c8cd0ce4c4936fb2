"""Centralized configuration management for the Beacon policy service."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file BEFORE any settings are read so class attributes see it
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


class Settings:
    """Application settings, read once from the environment.

    A single instance is built at import time and handed to every component
    constructor; request-handling code never consults ``os.environ``.
    """

    # =================================================================
    # APPLICATION
    # =================================================================
    APP_NAME: str = "Beacon Policy Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    # =================================================================
    # LOGGING
    # =================================================================
    LOG_DIR: Path = Path(os.getenv("LOG_DIR", "logs"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "beacon.log")
    LOG_MAX_BYTES: int = 10485760  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    SLOW_REQUEST_THRESHOLD: float = float(os.getenv("SLOW_REQUEST_THRESHOLD", "5.0"))

    # =================================================================
    # DATABASE (rule store + audit log)
    # =================================================================
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/beacon",  # Set credentials via env
    )
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "3600"))
    # Upper bound for a single rule lookup or audit insert, in seconds
    STORE_TIMEOUT: float = float(os.getenv("STORE_TIMEOUT", "5.0"))

    # =================================================================
    # AI JUDGE
    # =================================================================
    AI_BACKEND: str = os.getenv("AI_BACKEND", "gemini")  # gemini | ollama
    AI_TIMEOUT: float = float(os.getenv("AI_TIMEOUT", "15.0"))
    AI_TEMPERATURE: float = float(os.getenv("AI_TEMPERATURE", "0.0"))
    AI_BODY_SNIPPET_CHARS: int = int(os.getenv("AI_BODY_SNIPPET_CHARS", "1500"))

    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", os.getenv("GOOGLE_API_KEY", ""))
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-flash-latest")
    GEMINI_BASE_URL: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com"
    )

    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2:3b")

    # =================================================================
    # POLICY
    # =================================================================
    DEFAULT_RULE_PROMPT: str = os.getenv(
        "DEFAULT_RULE_PROMPT", "Block social media and news."
    )

    # =================================================================
    # CORS
    # The browser extension calls from chrome-extension:// origins, so the
    # default is permissive. Set ALLOWED_ORIGINS to a comma-separated list
    # to narrow it.
    # =================================================================
    ALLOWED_ORIGINS: list[str] = ["*"]

    def __init__(self):
        """Initialize settings and create necessary directories."""
        allowed_env = os.getenv("ALLOWED_ORIGINS")
        if allowed_env:
            parsed = [o.strip() for o in allowed_env.split(",") if o.strip()]
            if parsed:
                self.ALLOWED_ORIGINS = parsed

        self.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def _validate_production_env(self, issues: list[str]) -> None:
        """Validate production environment settings."""
        if self.ENVIRONMENT != "production":
            return

        if not os.getenv("DATABASE_URL"):
            issues.append("ERROR: DATABASE_URL not set (required in production)")
        if self.DEBUG:
            issues.append("WARNING: DEBUG=true in production")

    def _validate_ai_backend(self, issues: list[str]) -> None:
        """Validate the completion backend selection."""
        backend = self.AI_BACKEND.lower()
        if backend not in ("gemini", "ollama"):
            issues.append(f"ERROR: AI_BACKEND '{self.AI_BACKEND}' is not supported")
        elif backend == "gemini" and not self.GEMINI_API_KEY:
            issues.append("ERROR: GEMINI_API_KEY (or GOOGLE_API_KEY) not set")

        if self.AI_TIMEOUT <= 0:
            issues.append("ERROR: AI_TIMEOUT must be positive")
        if self.STORE_TIMEOUT <= 0:
            issues.append("ERROR: STORE_TIMEOUT must be positive")

    def validate_required(self) -> list[str]:
        """
        Validate required configuration at startup.
        Returns list of warnings/errors.
        """
        issues: list[str] = []
        logger = logging.getLogger(__name__)

        self._validate_production_env(issues)
        self._validate_ai_backend(issues)

        for issue in issues:
            log_method = logger.error if issue.startswith("ERROR") else logger.warning
            log_method(issue)

        return issues


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
