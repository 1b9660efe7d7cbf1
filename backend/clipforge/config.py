"""Configuration management with YAML and environment variable support."""

from pathlib import Path
from typing import ClassVar

import yaml
from pydantic import BaseModel, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from clipforge import DEFAULT_SESSION_SECRET


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads configuration from YAML file."""

    def get_field_value(self, field, field_name: str):
        # Not used with prepare method
        pass

    def prepare_field_value(self, field_name: str, field, value, value_is_complex: bool):
        return value

    def __call__(self):
        yaml_path = Path("config.yaml")
        if not yaml_path.exists():
            return {}

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return data


class LoggingConfig(BaseModel):
    level: str = "INFO"


class ServerConfig(BaseModel):
    """HTTP server and session cookie configuration."""

    host: str = "127.0.0.1"
    port: int = 5000
    session_secret: str = DEFAULT_SESSION_SECRET
    session_max_age: int = 24 * 60 * 60
    https_only: bool = False
    cors_origins: list[str] = ["http://localhost:5173"]
    public_base_url: str = "http://127.0.0.1:5000"


class StorageConfig(BaseModel):
    """Storage and database configuration."""

    database_url: str = "sqlite+aiosqlite:///clipforge.db"
    media_dir: Path = Path("tmp/media")

    @field_validator("media_dir", mode="before")
    @classmethod
    def convert_media_dir_to_path(cls, v):
        """Convert string to Path object."""
        if isinstance(v, str):
            return Path(v)
        return v


class AuthConfig(BaseModel):
    bcrypt_rounds: int = 10


class PipelineConfig(BaseModel):
    """Pipeline execution parameters."""

    tts_max_chars: int = 4096
    # The startup sweep fails every processing project, including runs owned by
    # sibling processes, so the API must run as a single uvicorn worker.
    fail_orphaned_on_startup: bool = True


class RenderConfig(BaseModel):
    """Video assembly (Creatomate) configuration.

    ``templates`` overrides the built-in per-type template ids; keys are
    content type values such as "tiktok".
    """

    api_url: str = "https://api.creatomate.com/v1"
    api_key: str = ""
    poll_interval: float = 2.0
    poll_max_attempts: int = 30
    templates: dict[str, str] = {}


class GoogleConfig(BaseModel):
    """Gemini configuration for prompt validation.

    Uses an API key by default; set use_vertex_ai with project_id to route
    through Vertex AI with Application Default Credentials instead.
    """

    api_key: str = ""
    model: str = "gemini-2.5-flash"
    use_vertex_ai: bool = False
    project_id: str = ""
    location: str = "us-central1"


class OpenAIConfig(BaseModel):
    api_key: str = ""
    script_model: str = "gpt-4o"
    max_tokens: int = 1500
    tts_model: str = "tts-1"
    tts_voice: str = "alloy"


class EdenAIConfig(BaseModel):
    api_key: str = ""
    api_url: str = "https://api.edenai.run/v2/image/generation"
    provider: str = "openai"


class HostingConfig(BaseModel):
    """S3-compatible media hosting (AWS S3, Cloudflare R2, MinIO)."""

    bucket: str = ""
    endpoint_url: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = "auto"
    public_base_url: str = ""
    prefix: str = "clipforge"


class HttpConfig(BaseModel):
    timeout_seconds: float = 60.0


class Settings(BaseSettings):
    """Main application settings with YAML and environment variable support.

    Configuration sources (in priority order):
    1. Environment variables (prefix: CLIPFORGE_, delimiter: __)
    2. .env file
    3. YAML file (config.yaml)
    4. Field defaults
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="CLIPFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    logging: LoggingConfig = LoggingConfig()
    server: ServerConfig = ServerConfig()
    storage: StorageConfig = StorageConfig()
    auth: AuthConfig = AuthConfig()
    pipeline: PipelineConfig = PipelineConfig()
    render: RenderConfig = RenderConfig()
    google: GoogleConfig = GoogleConfig()
    openai: OpenAIConfig = OpenAIConfig()
    edenai: EdenAIConfig = EdenAIConfig()
    hosting: HostingConfig = HostingConfig()
    http: HttpConfig = HttpConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        """Customize settings sources to include YAML configuration.

        Priority order (highest to lowest):
        1. Init settings (explicit keyword arguments, used by tests)
        2. Environment variables
        3. .env file
        4. YAML file
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )


# Singleton instance
settings = Settings()
