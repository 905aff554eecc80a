# actuals_app/stores/store_errors.py
import functools

from sqlalchemy.exc import OperationalError, InterfaceError

from actuals_app.errors import StoreUnavailableError
from actuals_app.logger import get_logger

logger = get_logger(__name__)

# 连接/锁/磁盘类故障：存储不可用。约束冲突、版本冲突等不在此列，交给调用方处理
STORE_FAILURES = (OperationalError, InterfaceError)


def store_call(func):
    """Translate driver-level failures of a store method into StoreUnavailableError."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except STORE_FAILURES as e:
            logger.error(f"[store] {func.__qualname__} failed: {e}")
            raise StoreUnavailableError(str(e)) from e
    return wrapper
