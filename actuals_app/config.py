# actuals_app/config.py
'''
运行配置：从 .env / 环境变量读取，集中成一个 Settings 对象
会被 db.session, logger, ActualsService 读取
'''
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

# 加载环境变量
load_dotenv()

# 项目根目录（使用绝对路径）
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Settings(BaseModel):
    database_url: str
    log_dir: str = "logs"
    log_level: str = "INFO"
    max_reconcile_retries: int = 3    # 乐观锁冲突后的最大重试次数
    sqlite_busy_timeout: float = 30.0  # 秒


def load_settings() -> Settings:
    """Build settings from the current environment (no caching)."""
    default_db_url = f"sqlite:///{os.path.join(BASE_DIR, 'actuals.db')}"
    return Settings(
        database_url=os.getenv("DATABASE_URL", default_db_url),
        log_dir=os.getenv("LOG_DIR", "logs"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        max_reconcile_retries=int(os.getenv("ACTUALS_MAX_RETRIES", 3)),
        sqlite_busy_timeout=float(os.getenv("SQLITE_BUSY_TIMEOUT", 30)),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
