"""
数据库自动初始化检查模块
在应用启动时自动检查并创建缺失的表
"""
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from actuals_app.db.base import Base
from actuals_app.db.init_db import init_db
from actuals_app.db.session import get_engine
from actuals_app.logger import get_logger

logger = get_logger(__name__)


def missing_tables(engine: Optional[Engine] = None) -> list[str]:
    """返回 metadata 中定义、但数据库里还不存在的表名"""
    engine = engine or get_engine()
    existing = set(inspect(engine).get_table_names())
    return sorted(name for name in Base.metadata.tables if name not in existing)


def auto_init(engine: Optional[Engine] = None) -> None:
    """
    自动初始化检查
    如果数据库缺表，自动执行建表（create_all 只创建缺失的表）
    """
    engine = engine or get_engine()
    logger.info("🔍 检查数据库初始化状态...")

    missing = missing_tables(engine)
    if not missing:
        logger.info("✅ 数据库表已存在")
        return

    logger.info(f"📦 缺少数据表 {missing}，正在创建...")
    try:
        init_db(engine)
    except Exception:
        logger.exception("❌ 数据库表创建失败")
        raise
    logger.info("✅ 数据库表创建成功")


if __name__ == "__main__":
    auto_init()
