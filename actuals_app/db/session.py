# actuals_app/db/session.py
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from actuals_app.config import get_settings
from actuals_app.logger import get_logger

logger = get_logger(__name__)

_engine = None
_SessionLocal = None


def build_engine(db_url: str, *, busy_timeout: Optional[float] = None) -> Engine:
    '''
    根据 URL 创建 engine
    sqlite 需要关闭同线程检查，并设置写锁等待时间（并发写入时排队而不是立刻报错）
    '''
    connect_args = {}
    if db_url.startswith("sqlite"):
        if busy_timeout is None:
            busy_timeout = get_settings().sqlite_busy_timeout
        connect_args = {"check_same_thread": False, "timeout": busy_timeout}
    return create_engine(db_url, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        db_url = get_settings().database_url
        if not db_url:
            raise RuntimeError("DATABASE_URL not set")
        logger.info(f"Using database URL: {db_url}")
        _engine = build_engine(db_url)
    return _engine


def get_session() -> Session:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = build_session_factory(get_engine())
    return _SessionLocal()
