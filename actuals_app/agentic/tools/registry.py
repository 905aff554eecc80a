# actuals_app/agentic/tools/registry.py
from typing import Dict, Optional, List
from actuals_app.agentic.schemas.tool_spec import ToolSpec


class ToolRegistry:
    _instance_created = False

    def __init__(self):
        # 全局只允许一个实例，必须使用模块级的 tool_registry
        if ToolRegistry._instance_created:
            raise RuntimeError("Use global tool_registry, do not instantiate ToolRegistry")
        ToolRegistry._instance_created = True

        self._tools: Dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        '''
        Register a new tool specification.
        Raises ValueError if a tool with the same name is already registered.
        '''
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return sorted(self._tools)


# 全局唯一实例，import的时候自动初始化
tool_registry = ToolRegistry()
