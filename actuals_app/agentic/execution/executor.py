# actuals_app/agentic/execution/executor.py
from typing import Dict, Any
from actuals_app.agentic.tools.registry import ToolRegistry
from actuals_app.agentic.schemas.tool_result import ToolResult
from actuals_app.agentic.schemas.error_type import ErrorType
from actuals_app.logger import get_logger

logger = get_logger(__name__)


def _system_failure(message: str, explanation: str) -> ToolResult:
    return ToolResult(
        ok=False,
        error_type=ErrorType.SYSTEM_ERROR,
        error_message=message,
        explanation=explanation,
    )


class PythonExecutor:
    """Runs registered tools in-process for a caller restricted by an allowlist."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def execute(self, *, tool_name: str, args: Dict[str, Any], allowlist: set[str]) -> ToolResult:
        '''
        1) allowlist 检查
        2) 从 registry 取 ToolSpec
        3) 调用 tool；tool 自己把业务异常分类成 ToolResult
        4) tool 抛出未分类异常或返回值类型不对，统一记为 SYSTEM_ERROR

        :param tool_name: 注册名，例如 "add_labor_entry"
        :param args: 传给 tool 的关键字参数（含 db session）
        :param allowlist: 当前调用方可用的 tool 名集合
        '''
        if tool_name not in allowlist:
            logger.warning(f"[executor] blocked {tool_name}: not in allowlist")
            return ToolResult(
                ok=False,
                error_type=ErrorType.TOOL_NOT_ALLOWED,
                error_message=f"{tool_name} is not in the caller's allowlist.",
                explanation="Use one of the allowed tools or ask for wider access.",
            )

        spec = self.registry.get(tool_name)
        if spec is None:
            return _system_failure(
                f"Tool '{tool_name}' is not registered.",
                "Registry is missing this tool; check that discover_tools() ran. Escalate.",
            )

        try:
            result = spec.func(**args)
        except Exception as e:
            logger.exception(f"[executor] {tool_name} raised instead of returning a ToolResult")
            return _system_failure(str(e), "Unhandled exception in tool. Escalate.")

        if not isinstance(result, ToolResult):
            return _system_failure(
                f"{tool_name} returned {type(result).__name__}, expected ToolResult.",
                "Tool implementation error. Escalate.",
            )

        logger.info(
            f"[executor] {tool_name} ok={result.ok}"
            + (f" error={result.error_type.value}" if result.error_type else "")
        )
        return result
