from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from .config import get_settings
from . import models  # noqa: F401  (테이블 등록)

DB_URL = get_settings().db_url
_connect_args = {"check_same_thread": False} if DB_URL.startswith("sqlite") else {}
engine = create_engine(DB_URL, echo=False, connect_args=_connect_args)  # 디버깅 시 True로


def init_db(bind: Optional[Engine] = None):
    SQLModel.metadata.create_all(bind or engine)
