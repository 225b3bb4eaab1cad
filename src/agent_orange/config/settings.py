"""
Pydantic Settings Configuration
=================================

Type-safe configuration management using Pydantic.
Validates all configuration values at startup and fails fast with clear error messages.
"""

from importlib import metadata
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_URL = "https://api.amazon.com/auth/o2/token"
DEFAULT_PROACTIVE_EVENTS_URL = "https://api.amazonalexa.com/v1/proactiveEvents/stages/development"
DEFAULT_LOCK_FILE = Path("/tmp/claude-approve.lock")


def _project_version() -> str:
    """Resolve the project version from package metadata."""
    try:
        return metadata.version("agent-orange")
    except metadata.PackageNotFoundError:
        return "0.0.0-dev"


_CHANGEME_PREFIXES = ("changeme", "change-me", "your_", "your-", "placeholder", "secret-change-me")


def _is_placeholder(value: str) -> bool:
    """Return True if value looks like an unfilled template placeholder."""
    v = value.lower()
    return any(v.startswith(p) or p in v for p in _CHANGEME_PREFIXES)


_SECRET_MIN_LENGTH = 16


def _is_weak_secret(value: str) -> bool:
    """Return True if value is too short or low-entropy for use as an API key."""
    stripped = value.strip()
    if len(stripped) < _SECRET_MIN_LENGTH:
        return True
    if len(set(stripped)) < 4:
        return True
    return False


class StoreConfig(BaseModel):
    """Backing record store configuration"""
    backend: Literal["sqlite", "memory"] = Field("sqlite", description="Record store backend")
    db_path: Path = Field(Path("data/agent_orange.db"), description="SQLite database path")

    model_config = ConfigDict(extra='allow')


class VoiceConfig(BaseModel):
    """Voice skill and outbound notification configuration"""
    client_id: Optional[str] = Field(None, description="Skill messaging client id (feed events)")
    client_secret: Optional[str] = Field(None, description="Skill messaging client secret (feed events)")
    token_url: str = Field(DEFAULT_TOKEN_URL, description="Client-credentials token endpoint")
    proactive_events_url: str = Field(
        DEFAULT_PROACTIVE_EVENTS_URL,
        description="Proactive feed-event endpoint (development stage by default)",
    )
    skill_id: Optional[str] = Field(None, description="Reject voice requests from any other application id")
    locale: str = Field("en-US", description="Locale used in notification payloads")

    @field_validator('client_secret')
    @classmethod
    def validate_client_secret(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and _is_placeholder(v):
            raise ValueError(
                "VOICE client_secret is still set to a placeholder value. "
                "Copy the real secret from the skill's permissions page."
            )
        return v

    @property
    def feed_events_enabled(self) -> bool:
        return bool(self.client_id and self.client_secret)

    model_config = ConfigDict(extra='allow')


class RelayConfig(BaseModel):
    """Chat relay (Telegram) configuration"""
    bot_token: str = Field(..., description="Telegram bot token from BotFather")
    authorized_user_id: int = Field(..., description="The only user whose messages are accepted")
    project_dir: Path = Field(default_factory=Path.cwd, description="Working directory for the agent")
    agent_binary: str = Field("claude", description="Agent executable invoked for each command")
    lock_file: Path = Field(DEFAULT_LOCK_FILE, description="PID file written by the terminal approval hook")
    max_message_length: int = Field(1990, ge=100, le=4096, description="Longest single chat message")
    typing_interval: float = Field(4.0, gt=0, description="Seconds between typing indicator refreshes")

    @field_validator('bot_token')
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v or _is_placeholder(v):
            raise ValueError(
                "RELAY bot_token is still set to a placeholder value. "
                "Set a real token from @BotFather."
            )
        if ':' not in v:
            raise ValueError("Bot token must be in format: 123456:ABC-DEF...")
        return v

    model_config = ConfigDict(extra='allow')


class WebConfig(BaseModel):
    """HTTP service configuration"""
    host: str = Field("127.0.0.1", description="Host to bind to")
    port: int = Field(8081, ge=1, le=65535, description="Port to bind to")
    api_key: Optional[str] = Field(None, description="Bearer key required on the producer API")

    @field_validator('api_key')
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if _is_placeholder(v):
            raise ValueError(
                "WEB api_key is still set to a placeholder value. "
                "Set a strong random key before exposing the API."
            )
        if _is_weak_secret(v):
            raise ValueError(
                f"WEB api_key is too weak (minimum {_SECRET_MIN_LENGTH} characters "
                "with reasonable entropy). Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
            )
        return v

    model_config = ConfigDict(extra='allow')


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    output_file: Optional[Path] = Field(None, description="Log file path")

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(valid_levels))}")
        return v_upper

    model_config = ConfigDict(extra='allow')


class Settings(BaseSettings):
    """
    Main application settings with type validation.

    Configuration is loaded from:
    1. YAML config file (if provided)
    2. Environment variables with AGENT_ORANGE_ prefix for anything the file leaves unset
    3. Default values (fallback)

    Environment variable mapping uses double-underscore nesting:
      AGENT_ORANGE_RELAY__BOT_TOKEN
      AGENT_ORANGE_VOICE__CLIENT_SECRET
      AGENT_ORANGE_STORE__BACKEND
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    relay: Optional[RelayConfig] = None
    web: WebConfig = Field(default_factory=WebConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    project_name: str = Field("Agent Orange", description="Name used in notification payloads")
    version: str = Field(default_factory=_project_version, description="Project version")

    model_config = SettingsConfigDict(
        env_prefix='AGENT_ORANGE_',
        env_nested_delimiter='__',
        extra='allow',
        validate_assignment=True,
    )

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "Settings":
        """
        Load settings from a YAML file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables only."""
        return cls()

    def ensure_directories(self) -> None:
        """Create the database directory when the sqlite backend is used"""
        if self.store.backend == "sqlite":
            self.store.db_path.parent.mkdir(parents=True, exist_ok=True)

    def validate_required_config(self) -> List[str]:
        """
        Validate cross-field requirements.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        if bool(self.voice.client_id) != bool(self.voice.client_secret):
            errors.append("voice.client_id and voice.client_secret must be set together")
        return errors


def load_settings(config_path: Optional[str | Path] = None) -> Settings:
    """
    Load and validate application settings.

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path:
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings.from_env()

    settings.ensure_directories()

    errors = settings.validate_required_config()
    if errors:
        raise ValueError(
            "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )

    return settings


__all__ = [
    'Settings',
    'StoreConfig',
    'VoiceConfig',
    'RelayConfig',
    'WebConfig',
    'LoggingConfig',
    'load_settings',
]
