# actuals_app/agentic/tools/auto_discover.py
import pkgutil
import importlib
import actuals_app.agentic.tools
'''
启动时：

from actuals_app.agentic.tools.registry import tool_registry
from actuals_app.agentic.tools.auto_discover import discover_tools
discover_tools()  # 导入 tools 包下所有模块，触发模块级的 tool_registry.register(...)

tool_registry.get("add_labor_entry")
'''


def discover_tools():
    for _, module_name, _ in pkgutil.walk_packages(
        actuals_app.agentic.tools.__path__,
        actuals_app.agentic.tools.__name__ + "."
    ):
        importlib.import_module(module_name)
