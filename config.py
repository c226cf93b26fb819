from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.enums import DEFAULT_PALETTE_SIZE, PALETTE_SIZES

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    bot_token: str = Field("", validation_alias=AliasChoices("BOT_TOKEN", "bot_token"))
    db_url: str = Field("sqlite:///palettes.db", validation_alias=AliasChoices("DB_URL", "db_url"))
    default_color_count: int = Field(DEFAULT_PALETTE_SIZE, validation_alias=AliasChoices("DEFAULT_COLOR_COUNT", "default_color_count"))  # 3|5|7|9
    sampling_stride: int = Field(10, gt=0, validation_alias=AliasChoices("SAMPLING_STRIDE", "sampling_stride"))
    workers: int = Field(4, gt=0, validation_alias=AliasChoices("WORKERS", "workers"))

    @field_validator("default_color_count")
    @classmethod
    def _known_size(cls, v: int) -> int:
        if v not in PALETTE_SIZES:
            raise ValueError(f"default_color_count must be one of {PALETTE_SIZES}")
        return v
