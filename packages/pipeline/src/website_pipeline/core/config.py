from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .json import read_json

LogFormat = Literal["json", "console"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WEBSITE_PIPELINE_",
        env_file=".env",
        extra="ignore",
    )

    out_dir: Path = Field(default=Path("cdk.out"))
    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="console")

    # Used when the props file omits oauth_token.
    oauth_token: Optional[SecretStr] = None


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()


def load_props_file(path: Path, *, settings: Settings | None = None) -> dict[str, Any]:
    """
    Read raw stack props from a JSON file, filling oauth_token from settings
    when the file does not carry it.
    """
    raw = read_json(Path(path))
    s = settings or load_settings()
    if "oauth_token" not in raw and s.oauth_token is not None:
        raw["oauth_token"] = s.oauth_token
    return raw
