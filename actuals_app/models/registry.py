# actuals_app/models/registry.py
# 导入所有表，保证 Base.metadata 完整、relationship 能解析到目标类
from actuals_app.models.project import Project
from actuals_app.models.project_actuals import ProjectActuals
from actuals_app.models.labor_entry import LaborEntry
from actuals_app.models.material_entry import MaterialEntry
from actuals_app.models.subcontractor_entry import SubcontractorEntry
from actuals_app.models.audit_log import AuditLog

__all__ = [
    "Project",
    "ProjectActuals",
    "LaborEntry",
    "MaterialEntry",
    "SubcontractorEntry",
    "AuditLog",
]
