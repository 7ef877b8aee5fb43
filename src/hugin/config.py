"""Hugin configuration.

Two layers:
- HuginConfig: the JSON configuration file (credentials, Docker endpoint,
  guild, server list). Path comes from HUGIN_CONFIG_FILE_PATH.
- Sub-configs (DockerConfig, LoggingConfig, ServerConfig, DiscordConfig):
  operational knobs read from the environment with pydantic-settings.

Environment variable prefix: HUGIN_
Example: HUGIN_LOGGING_FORMAT=json
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_pascal
from pydantic_settings import BaseSettings, SettingsConfigDict

from hugin.errors import ConfigurationError

CONFIG_PATH_ENV = "HUGIN_CONFIG_FILE_PATH"


class DockerConfig(BaseSettings):
    """Docker runtime settings."""

    model_config = SettingsConfigDict(env_prefix="HUGIN_DOCKER_")

    api_timeout: float = Field(default=30.0, description="Docker API call timeout (seconds)")
    stop_grace_seconds: int = Field(
        default=5,
        description="Seconds the daemon waits after a stop request before killing",
    )
    kill_signal: str = Field(default="SIGKILL", description="Signal sent on forceful kill")


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats for different environments:
    - text: Human-readable console output
    - json: Structured logging for log aggregation
    """

    model_config = SettingsConfigDict(env_prefix="HUGIN_LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="hugin", description="Service identifier in logs")


class ServerConfig(BaseSettings):
    """HTTP server configuration for the interactions endpoint."""

    model_config = SettingsConfigDict(env_prefix="HUGIN_SERVER_")

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")


class DiscordConfig(BaseSettings):
    """Discord REST settings."""

    model_config = SettingsConfigDict(env_prefix="HUGIN_DISCORD_")

    api_base_url: str = Field(
        default="https://discord.com/api/v10",
        description="Discord REST API base URL",
    )
    timeout: float = Field(default=15.0, description="Discord REST call timeout (seconds)")


class ServerEntry(BaseModel):
    """One managed server as written in the configuration file."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, frozen=True)

    name: str
    container: str
    channel_id: int


class HuginConfig(BaseModel):
    """Complete runtime configuration.

    Built once at startup and passed explicitly to every component. The
    application id and public key may be omitted; they are then looked up
    from the bot token at startup (see hugin.main.resolve_application).
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    discord_token: str
    discord_application_id: int | None = None
    discord_public_key: str | None = None
    docker_endpoint: str = "unix:///var/run/docker.sock"
    guild_id: int
    servers: list[ServerEntry] = Field(default_factory=list)

    # Environment-driven sub-configurations
    docker: DockerConfig = Field(default_factory=DockerConfig, exclude=True)
    logging: LoggingConfig = Field(default_factory=LoggingConfig, exclude=True)
    server: ServerConfig = Field(default_factory=ServerConfig, exclude=True)
    discord: DiscordConfig = Field(default_factory=DiscordConfig, exclude=True)


class BootstrapSettings(BaseSettings):
    """Environment needed before the configuration file can be read."""

    model_config = SettingsConfigDict(env_prefix="HUGIN_")

    config_file_path: str = ""


def load_config(path: str | Path | None = None) -> HuginConfig:
    """Load configuration from a JSON file.

    Args:
        path: Configuration file path. Falls back to HUGIN_CONFIG_FILE_PATH.

    Raises:
        ConfigurationError: If the path is unset, unreadable or invalid.
    """
    if path is None:
        path = BootstrapSettings().config_file_path
        if not path:
            raise ConfigurationError(f"{CONFIG_PATH_ENV} environment variable is not set")

    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}") from e

    try:
        return HuginConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration file {config_path}: {e}") from e
