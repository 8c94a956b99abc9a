from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoaderConfig(BaseSettings):
    """Image loader configuration"""

    model_config = SettingsConfigDict(env_prefix="MLCORE_LOADER_")

    # 0 means "take from the decoded file"
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    channels: int = Field(default=0, ge=0, le=4)
    max_concurrent_loads: int = Field(default=8, ge=1)


class AppSettings(BaseSettings):
    """Package settings"""

    model_config = SettingsConfigDict(
        env_prefix="MLCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False
    log_level: str = "INFO"

    loader: LoaderConfig = Field(default_factory=LoaderConfig)


# Global settings instance
settings = AppSettings()
