from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PrivateAttr
from typing import List, Optional
from dotenv import load_dotenv, find_dotenv


class ProviderConfig(BaseSettings):
    """OpenAI provider configuration (env prefix ``OPENAI_``)."""

    api_key: Optional[str] = Field(default=None, description="OPENAI_API_KEY")
    model: str = Field(default="gpt-4o-mini", description="Chat model for sentiment, summary and video summary")
    vision_model: str = Field(default="gpt-4o", description="Vision-capable chat model for frame analysis")
    transcription_model: str = Field(default="whisper-1")
    base_url: Optional[str] = Field(default=None)
    # None leaves the SDK defaults in place
    timeout: Optional[float] = Field(default=None)
    max_retries: Optional[int] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def to_provider_config(self, model: Optional[str] = None) -> dict:
        """Convert to the plain dict the provider classes accept."""
        config = {
            "api_key": self.api_key,
            "model": model or self.model,
            "base_url": self.base_url,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
        }
        return {k: v for k, v in config.items() if v is not None}


class MediaConfig(BaseSettings):
    """ffmpeg, temp area and upload limits."""

    ffmpeg_path: Optional[str] = Field(default=None)
    ffprobe_path: Optional[str] = Field(default=None)
    temp_dir: Optional[str] = Field(default=None, description="Defaults to the system temp directory")
    download_timeout_seconds: float = Field(default=300.0, gt=0)
    max_upload_size_mb: float = Field(default=25.0, gt=0)
    audio_bitrate: str = Field(default="64k")
    audio_sample_rate: int = Field(default=16000, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    api_base_path: str = Field(default="/api")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class LoggingConfig(BaseSettings):
    """Logging configuration (env prefix ``LOG_``)."""

    level: str = Field(default="INFO")
    file: Optional[str] = Field(default=None)
    enable_json: bool = Field(default=False)
    enable_file: bool = Field(default=False)
    max_file_size: str = Field(default="10 MB")
    retention_days: int = Field(default=7)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class MediaScribeConfig(BaseSettings):
    """Main configuration class."""

    # Application settings
    app_name: str = Field(default="MediaScribe")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    _provider: Optional[ProviderConfig] = PrivateAttr(default=None)
    _media: Optional[MediaConfig] = PrivateAttr(default=None)
    _server: Optional[ServerConfig] = PrivateAttr(default=None)
    _logging: Optional[LoggingConfig] = PrivateAttr(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )

    def __init__(self, **kwargs):
        # Force load environment variables before initializing
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)

    @classmethod
    def build(
        cls,
        provider: Optional[ProviderConfig] = None,
        media: Optional[MediaConfig] = None,
        server: Optional[ServerConfig] = None,
        logging: Optional[LoggingConfig] = None,
        **kwargs,
    ) -> "MediaScribeConfig":
        """Create a config with some sub-configs supplied up front."""
        config = cls(**kwargs)
        config._provider = provider
        config._media = media
        config._server = server
        config._logging = logging
        return config

    @property
    def provider(self) -> ProviderConfig:
        if self._provider is None:
            self._provider = ProviderConfig()
        return self._provider

    @property
    def media(self) -> MediaConfig:
        if self._media is None:
            self._media = MediaConfig()
        return self._media

    @property
    def server(self) -> ServerConfig:
        if self._server is None:
            self._server = ServerConfig()
        return self._server

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig()
        return self._logging
