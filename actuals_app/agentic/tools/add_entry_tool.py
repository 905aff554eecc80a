from typing import Any, Dict

from sqlalchemy.orm import Session

from actuals_app.agentic.schemas.tool_result import ToolResult
from actuals_app.agentic.schemas.tool_spec import ToolSpec
from actuals_app.agentic.schemas.risk_profile import ToolRiskProfile
from actuals_app.agentic.tools.error_mapping import classify_actuals_error, explain
from actuals_app.agentic.tools.registry import tool_registry
from actuals_app.logger import get_logger
from actuals_app.schemas.dto.entry_dto import entry_to_dto
from actuals_app.services.actuals_service import ActualsService
from actuals_app.services.audit_log_service import AuditLogService

logger = get_logger(__name__)

ADDERS = {
    "labor": ActualsService.add_labor_entry,
    "material": ActualsService.add_material_entry,
    "subcontractor": ActualsService.add_subcontractor_entry,
}


#Part 1 工具实现
def _add_entry(kind: str, db: Session, project_id: str, entry: Dict[str, Any], operator_id: str) -> ToolResult:
    service = ActualsService(db=db, audit_log_service=AuditLogService(db))

    try:
        # 事务边界在 ActualsService 内（含版本冲突重试），tool 不再 commit / rollback
        created = ADDERS[kind](service, project_id, entry, operator_id=operator_id)
        # 本次调用写回的快照，而不是提交后库里的最新值
        snapshot = service.last_reconciled

        return ToolResult(
            ok=True,
            data={
                "entry": entry_to_dto(created).model_dump(mode="json"),
                "actuals_version": snapshot.version,
                "total_actual_cost": str(snapshot.cost.total),
                "variance": str(snapshot.variance),
            },
            explanation=(
                f"{kind.capitalize()} entry recorded and project actuals recomputed. "
                "Use get_project_actuals for the full breakdown."
            ),
            side_effect=True,
            audit_ref_id=created.id,
        )

    except Exception as e:
        et, msg = classify_actuals_error(e)
        logger.warning(f"[tool] add_{kind}_entry failed project={project_id}: {et.value} {msg}")
        return ToolResult(
            ok=False,
            error_type=et,
            error_message=msg,
            explanation=explain(et),
            side_effect=False,
        )


def add_labor_entry_tool(*, db: Session, project_id: str, entry: Dict[str, Any], operator_id: str) -> ToolResult:
    """
    Tool: add_labor_entry

    Side effects:
    - Creates LaborEntry
    - Recomputes ProjectActuals (creates it on first use)
    """
    return _add_entry("labor", db, project_id, entry, operator_id)


def add_material_entry_tool(*, db: Session, project_id: str, entry: Dict[str, Any], operator_id: str) -> ToolResult:
    """
    Tool: add_material_entry

    Side effects:
    - Creates MaterialEntry
    - Recomputes ProjectActuals (creates it on first use)
    """
    return _add_entry("material", db, project_id, entry, operator_id)


def add_subcontractor_entry_tool(*, db: Session, project_id: str, entry: Dict[str, Any], operator_id: str) -> ToolResult:
    """
    Tool: add_subcontractor_entry

    Side effects:
    - Creates SubcontractorEntry (balance = contract_amount - total_paid, fixed at write time)
    - Recomputes ProjectActuals (creates it on first use)
    """
    return _add_entry("subcontractor", db, project_id, entry, operator_id)


#Part 2 注册工具，import时自动注册
_ENTRY_RISK = ToolRiskProfile(
    modifies_persistent_data=True,
    deletes_data=False,
    affects_multiple_records=True,
)

tool_registry.register(ToolSpec(
    name="add_labor_entry",
    func=add_labor_entry_tool,
    description="Record a labor cost entry for a project and recompute its actuals",
    input_schema={"db": "Session",
                  "project_id": "str",
                  "entry": "LaborEntryInput (date, description, totalCost, trade, totalHours?, laborRate?, phase?, crew?)",
                  "operator_id": "str"},
    output_schema="ToolResult",
    risk_profile=_ENTRY_RISK,
))

tool_registry.register(ToolSpec(
    name="add_material_entry",
    func=add_material_entry_tool,
    description="Record a material purchase for a project and recompute its actuals",
    input_schema={"db": "Session",
                  "project_id": "str",
                  "entry": "MaterialEntryInput (date, materialName, totalCost, category, quantity?, unit?, unitCost?, vendor?, invoiceNumber?, poNumber?)",
                  "operator_id": "str"},
    output_schema="ToolResult",
    risk_profile=_ENTRY_RISK,
))

tool_registry.register(ToolSpec(
    name="add_subcontractor_entry",
    func=add_subcontractor_entry_tool,
    description="Record a subcontract for a project and recompute its actuals",
    input_schema={"db": "Session",
                  "project_id": "str",
                  "entry": "SubcontractorEntryInput (subcontractorName, scopeOfWork, contractAmount, totalPaid, trade, company?, email?, phone?)",
                  "operator_id": "str"},
    output_schema="ToolResult",
    risk_profile=_ENTRY_RISK,
))
