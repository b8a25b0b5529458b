from __future__ import annotations

import warnings
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    domain: str = "localhost"
    jwt_secret: str = ""  # HS256 signing secret, shared by issuance and verification
    jwt_access_token_expire_minutes: int = 15

    @model_validator(mode="after")
    def _check_jwt_secret(self) -> Settings:
        self.jwt_secret = self.jwt_secret.strip()
        if not self.jwt_secret:
            warnings.warn(
                "JWT_SECRET is not set. Token issuance and verification will "
                "fail and the application will refuse to start.",
                stacklevel=2,
            )
        return self

    db_url: str = "sqlite:///./inkpost.db"
    log_level: str = "INFO"
    log_dir: Path | None = None  # When set, info.log and errors.log are written here


@lru_cache
def get_settings() -> Settings:
    return Settings()
