from typing import Callable, Any, Dict, Optional
from pydantic import BaseModel
from actuals_app.agentic.schemas.risk_profile import ToolRiskProfile


class ToolSpec(BaseModel):
    '''
    一个工具的规范：名称、实现、输入输出说明、风险评估

    name	工具的唯一名称，用于注册和调用
    func	工具的实际函数实现，返回 ToolResult
    description	做什么、前置条件、副作用
    input_schema	输入参数说明
    output_schema	输出说明
    risk_profile	风险评估
    '''
    name: str
    func: Callable[..., Any]
    description: str
    input_schema: Dict[str, Any]
    output_schema: str
    risk_profile: ToolRiskProfile
    example_usage: Optional[str] = None
