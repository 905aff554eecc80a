# actuals_app/agentic/schemas/tool_result.py
from typing import Any, Dict, Optional
from pydantic import BaseModel
from actuals_app.agentic.schemas.error_type import ErrorType


class ToolResult(BaseModel):
    '''
    工具执行结果的结构化表达

    ok: 这次调用是否完成预期操作
    error_type / error_message: 失败时的分类与原始报错
    data: 结构化结果（DTO 的 json dump）
    explanation: 给调用方的自然语言解释与下一步建议
    side_effect: 是否改变了持久化状态
    audit_ref_id: 用于审计追踪的实体 id
    '''
    ok: bool

    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None

    data: Optional[Dict[str, Any]] = None
    explanation: Optional[str] = None

    side_effect: bool = False

    audit_ref_id: Optional[str] = None
