# actuals_app/logger.py
import logging
from logging.handlers import RotatingFileHandler
import os

from actuals_app.config import get_settings


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger  # 防止重复添加 handler

    settings = get_settings()
    os.makedirs(settings.log_dir, exist_ok=True)

    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
    )

    # 控制台输出
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    # 文件输出（滚动）
    file_handler = RotatingFileHandler(
        os.path.join(settings.log_dir, "actuals.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger
