from __future__ import annotations

import importlib.metadata
import json
from typing import Annotated

from loguru import logger
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def list_parse_fallback(v: str):
    v = v.replace(" ", "")
    if len(v) > 0:
        if v.startswith("[") or v.startswith("{"):
            return json.loads(v)
        else:
            return v.split(",")
    else:
        return []


class LnscanSettings(BaseModel):
    @classmethod
    def validate_list(cls, val):
        if isinstance(val, str):
            val = list_parse_fallback(val)
        return val


class EnvSettings(LnscanSettings):
    debug: bool = Field(default=False)
    version: str = Field(default="0.0.0")
    user_agent: str = Field(default="")
    enable_log_to_file: bool = Field(default=False)
    log_folder: str = Field(default="./logs")
    log_rotation: str = Field(default="100 MB")
    log_retention: str = Field(default="3 months")


class HttpSettings(LnscanSettings):
    http_timeout: float = Field(default=10.0)
    http_follow_redirects: bool = Field(default=True)


class DnsSettings(LnscanSettings):
    dns_nameservers: Annotated[list[str], NoDecode] = Field(default=[])
    dns_timeout: float = Field(default=5.0)
    dns_require_dnssec: bool = Field(default=True)

    @field_validator("dns_nameservers", mode="before")
    @classmethod
    def validate_nameservers(cls, val):
        return cls.validate_list(val)


class Settings(EnvSettings, HttpSettings, DnsSettings, BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="lnscan_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()

try:
    settings.version = importlib.metadata.version("lnscan")
except importlib.metadata.PackageNotFoundError:
    logger.debug("lnscan is not installed, keeping default version")

if not settings.user_agent:
    settings.user_agent = f"lnscan/{settings.version}"


__all__ = [
    "DnsSettings",
    "EnvSettings",
    "HttpSettings",
    "Settings",
    "settings",
]
