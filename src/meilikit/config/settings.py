"""Client settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (MEILIKIT_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class PollSettings(BaseModel):
    """Caller-side polling loop configuration (used by ``meilikit status --wait``)."""

    interval: float = Field(default=0.5, gt=0, description="Seconds between two status checks")
    timeout: float = Field(default=30.0, gt=0, description="Give up waiting after this many seconds")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root client settings.

    Configuration is loaded from environment variables with the MEILIKIT_ prefix.
    Nested settings use double underscores: MEILIKIT_POLL__INTERVAL=1.0

    Example:
        MEILIKIT_HOST=http://search.internal:7700
        MEILIKIT_API_KEY=masterKey
        MEILIKIT_OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = {
        "env_prefix": "MEILIKIT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    host: str = Field(default="http://localhost:7700", description="MeiliSearch server URL")
    api_key: str | None = Field(default=None, description="API key sent with every request")
    timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")

    poll: PollSettings = Field(default_factory=PollSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the file are passed as init arguments, so they take
        precedence over environment variables; unset keys still fall back
        to the environment and then to defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
