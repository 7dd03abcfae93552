from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Config:
    database_url: str
    admin_key: Optional[str]
    db_pool_timeout: int
    db_pool_recycle: int


def load_config() -> Config:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set")

    return Config(
        database_url=database_url,
        admin_key=(os.getenv("ADMIN_KEY") or "").strip() or None,
        db_pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
        db_pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),
    )
