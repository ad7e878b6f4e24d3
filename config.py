"""
Purpose: Environment-driven settings shared by the store, the location reporter and scripts.

Example .env:
DRIVERADAR_DB_PATH=driveradar.db
DRIVERADAR_API_URL=http://localhost:8000
ADMIN_PASSWORD=change-me
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class AppSettings:
    db_path: str = os.getenv("DRIVERADAR_DB_PATH", "driveradar.db")
    api_url: str = os.getenv("DRIVERADAR_API_URL", "http://localhost:8000")
    # seconds to wait for the analytics backend before giving up on a ping
    api_timeout: int = int(os.getenv("DRIVERADAR_API_TIMEOUT", "5"))

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.db_path}"


settings = AppSettings()
