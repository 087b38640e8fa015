import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=True)  # ✅ 모듈 import 시 1번만

DEFAULT_DB_URL = "sqlite:///./conference_tracker.db"
DEFAULT_STORAGE_KEY = "conference_manager_pro_data"
DEFAULT_HTTP_TIMEOUT = 5.0


@dataclass(frozen=True)
class Settings:
    db_url: str
    snapshot_url: str
    storage_key: str
    http_timeout: float
    github_repo: str
    log_level: str


def get_settings() -> Settings:
    timeout_raw = (os.getenv("CONF_TRACKER_HTTP_TIMEOUT") or "").strip()
    return Settings(
        db_url=(os.getenv("CONF_TRACKER_DB_URL") or DEFAULT_DB_URL).strip(),
        # 비어 있으면 remote tier 건너뜀
        snapshot_url=(os.getenv("CONF_TRACKER_SNAPSHOT_URL") or "").strip(),
        storage_key=(os.getenv("CONF_TRACKER_STORAGE_KEY") or DEFAULT_STORAGE_KEY).strip(),
        http_timeout=float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT,
        github_repo=(os.getenv("CONF_TRACKER_GITHUB_REPO") or "").strip().strip("/"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )


def get_admin_password() -> str:
    return (os.getenv("ADMIN_PASSWORD") or "").strip()
