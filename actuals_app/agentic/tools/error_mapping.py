# actuals_app/agentic/tools/error_mapping.py
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from actuals_app.agentic.schemas.error_type import ErrorType
from actuals_app.errors import ConcurrentUpdateConflictError, NotFoundError, StoreUnavailableError


def classify_actuals_error(e: Exception) -> tuple[ErrorType, str]:
    """
    把 ActualsService 抛出的异常映射为 ErrorType。
    service 已经抛结构化异常，这里按类型分类，不再匹配报错文本。
    """
    msg = str(e)

    # --- 入参结构 ---
    if isinstance(e, ValidationError):
        return ErrorType.SCHEMA_ERROR, msg

    # --- 并发 / 存储 ---
    if isinstance(e, ConcurrentUpdateConflictError):
        return ErrorType.CONCURRENCY_CONFLICT, msg
    if isinstance(e, (StoreUnavailableError, SQLAlchemyError)):
        return ErrorType.DATABASE_ERROR, msg

    # --- 业务输入：不存在的项目/条目，不可修改的字段 ---
    if isinstance(e, (NotFoundError, ValueError)):
        return ErrorType.INPUT_ERROR, msg

    return ErrorType.SYSTEM_ERROR, msg


EXPLANATIONS = {
    ErrorType.SCHEMA_ERROR: (
        "Entry payload does not match the expected structure. "
        "Fix the fields listed in the error message and retry."
    ),
    ErrorType.INPUT_ERROR: (
        "Input is invalid (project or entry not found, or the field cannot be edited). "
        "Ask the user to re-check inputs and retry."
    ),
    ErrorType.CONCURRENCY_CONFLICT: (
        "ProjectActuals kept changing while this call was recomputing it. Nothing was saved. "
        "Wait briefly and retry."
    ),
    ErrorType.DATABASE_ERROR: (
        "Database unavailable. Nothing was saved. Retry may work; if repeated, escalate."
    ),
    ErrorType.SYSTEM_ERROR: (
        "Unexpected system error occurred. Retry once; if it fails again, escalate."
    ),
}


def explain(error_type: ErrorType) -> str:
    return EXPLANATIONS.get(error_type, EXPLANATIONS[ErrorType.SYSTEM_ERROR])
