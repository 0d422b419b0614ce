"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Every setting has a default so the console starts with an empty
environment; production deployments should at least pin
SESSION_ENCRYPTION_KEY so session files survive a lost key file.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load .env file from project root
# This must happen before accessing os.environ
load_dotenv(PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for daily log files
        sessions_dir: Directory holding one encrypted file per session
        session_encryption_key: Externally supplied key, if any
        session_key_file: Where a generated key is stored between restarts
        session_ttl_hours: Fixed session lifetime
        session_sweep_interval_seconds: Period of the expiry sweep
        session_validation_timeout_seconds: Cutoff for validating a descriptor
        query_timeout_seconds: Cutoff for request-level database operations
        proxy_request_timeout_seconds: HTTP timeout for the MySQL proxy
        google_api_key: API key for Google Gemini (empty disables it)
        groq_api_key: API key for Groq (empty disables it)
        llm_model: Primary model identifier
        llm_fallback_model: Fallback model identifier
        llm_temperature: LLM creativity (0.0 = deterministic, 1.0 = creative)
        llm_max_tokens: Maximum response length
        enable_audit_logging: Log every request through AuditMiddleware
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str
    log_dir: Path

    # Session store settings
    sessions_dir: Path
    session_encryption_key: Optional[str]
    session_key_file: Path
    session_ttl_hours: int
    session_sweep_interval_seconds: int
    session_validation_timeout_seconds: float
    query_timeout_seconds: float
    proxy_request_timeout_seconds: float

    # LLM settings
    google_api_key: str
    groq_api_key: str
    llm_model: str
    llm_fallback_model: str
    llm_temperature: float
    llm_max_tokens: int

    # Safety settings
    enable_audit_logging: bool

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once at startup; lru_cache keeps a single
    instance for the life of the process.

    Returns:
        Settings instance with all configuration values
    """
    sessions_dir = Path(_get_env("SESSIONS_DIR", str(PROJECT_ROOT / ".sessions")))
    key_file = os.environ.get("SESSION_KEY_FILE")

    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "DatabaseConsole"),
        app_env=_get_env("APP_ENV", "development"),
        log_level=_get_env("LOG_LEVEL", "INFO"),
        log_dir=Path(_get_env("LOG_DIR", str(PROJECT_ROOT / "logs"))),

        # Session store
        sessions_dir=sessions_dir,
        session_encryption_key=os.environ.get("SESSION_ENCRYPTION_KEY") or None,
        session_key_file=Path(key_file) if key_file else sessions_dir / ".session-key",
        session_ttl_hours=int(_get_env("SESSION_TTL_HOURS", "24")),
        session_sweep_interval_seconds=int(_get_env("SESSION_SWEEP_INTERVAL_SECONDS", "300")),
        session_validation_timeout_seconds=float(_get_env("SESSION_VALIDATION_TIMEOUT_SECONDS", "10")),
        query_timeout_seconds=float(_get_env("QUERY_TIMEOUT_SECONDS", "30")),
        proxy_request_timeout_seconds=float(_get_env("PROXY_REQUEST_TIMEOUT_SECONDS", "30")),

        # LLM
        google_api_key=_get_env("GOOGLE_API_KEY", ""),
        groq_api_key=_get_env("GROQ_API_KEY", ""),
        llm_model=_get_env("LLM_MODEL", "gemini-2.0-flash-lite"),
        llm_fallback_model=_get_env("LLM_FALLBACK_MODEL", "llama-3.3-70b-versatile"),
        llm_temperature=float(_get_env("LLM_TEMPERATURE", "0.0")),
        llm_max_tokens=int(_get_env("LLM_MAX_TOKENS", "800")),

        # Safety
        enable_audit_logging=_get_env("ENABLE_AUDIT_LOGGING", "true").lower() == "true",
    )
