from sqlalchemy.orm import Session

from actuals_app.agentic.schemas.tool_result import ToolResult
from actuals_app.agentic.schemas.tool_spec import ToolSpec
from actuals_app.agentic.schemas.risk_profile import ToolRiskProfile
from actuals_app.agentic.tools.error_mapping import classify_actuals_error, explain
from actuals_app.agentic.tools.registry import tool_registry
from actuals_app.logger import get_logger
from actuals_app.services.actuals_service import ActualsService
from actuals_app.services.audit_log_service import AuditLogService

logger = get_logger(__name__)


def get_project_actuals_tool(*, db: Session, project_id: str, operator_id: str) -> ToolResult:
    """
    Tool: get_project_actuals

    Side effects:
    - Creates ProjectActuals if the project has none yet
    - Recomputes the snapshot from the entry tables before returning it
    """
    service = ActualsService(db=db, audit_log_service=AuditLogService(db))

    try:
        service.get_project_actuals(project_id, operator_id=operator_id)
        dto = service.last_reconciled

        return ToolResult(
            ok=True,
            data=dto.model_dump(mode="json"),
            explanation=(
                "Actual cost recomputed from all recorded entries. "
                "A negative variance means the project is under its estimate."
            ),
            side_effect=True,
            audit_ref_id=dto.id,
        )

    except Exception as e:
        et, msg = classify_actuals_error(e)
        logger.warning(f"[tool] get_project_actuals failed project={project_id}: {et.value} {msg}")
        return ToolResult(
            ok=False,
            error_type=et,
            error_message=msg,
            explanation=explain(et),
            side_effect=False,
        )


tool_registry.register(ToolSpec(
    name="get_project_actuals",
    func=get_project_actuals_tool,
    description="Recompute and return a project's actual cost, breakdown and variance against estimate",
    input_schema={"db": "Session",
                  "project_id": "str",
                  "operator_id": "str"},
    output_schema="ToolResult",
    risk_profile=ToolRiskProfile(
        modifies_persistent_data=True,
        deletes_data=False,
        affects_multiple_records=False,
    ),
))
