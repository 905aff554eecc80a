from decimal import Decimal

import pytest

from actuals_app.agentic.execution.executor import PythonExecutor
from actuals_app.agentic.schemas.error_type import ErrorType
from actuals_app.agentic.tools.auto_discover import discover_tools
from actuals_app.agentic.tools.registry import tool_registry, ToolRegistry
from actuals_app.agentic.tools.add_entry_tool import add_labor_entry_tool, add_subcontractor_entry_tool
from actuals_app.agentic.tools.project_actuals_tool import get_project_actuals_tool
from actuals_app.services.actuals_service import ActualsService
from actuals_app.services.audit_log_service import AuditLogService
from actuals_app.tests.payloads import labor, subcontractor

ALL_TOOLS = {"add_labor_entry", "add_material_entry", "add_subcontractor_entry", "get_project_actuals"}


@pytest.fixture
def executor():
    discover_tools()
    return PythonExecutor(tool_registry)


def test_discover_registers_every_tool():
    discover_tools()

    assert ALL_TOOLS <= set(tool_registry.names())
    assert tool_registry.get("add_labor_entry").risk_profile.modifies_persistent_data


def test_registry_is_singleton():
    with pytest.raises(RuntimeError):
        ToolRegistry()


def test_add_labor_entry_tool_ok(db, project_id):
    result = add_labor_entry_tool(db=db, project_id=project_id, entry=labor(300), operator_id="Agent")

    assert result.ok
    assert result.side_effect
    assert result.data["entry"]["trade"] == "plumbing"
    assert Decimal(result.data["total_actual_cost"]) == Decimal("300")
    assert result.audit_ref_id == result.data["entry"]["id"]


def test_add_entry_tool_reports_its_own_reconcile(db, session_factory, project_id, monkeypatch):
    other_db = session_factory()
    try:
        other = ActualsService(db=other_db, audit_log_service=AuditLogService(other_db))
        real_commit = db.commit
        commits = []

        def commit_then_interleave():
            real_commit()
            commits.append(1)
            if len(commits) == 1:
                # 提交之后、tool 组装返回值之前，另一个调用方又记了一笔
                other.add_labor_entry(project_id, labor(50))

        monkeypatch.setattr(db, "commit", commit_then_interleave)
        result = add_labor_entry_tool(db=db, project_id=project_id, entry=labor(300), operator_id="Agent")
    finally:
        other_db.close()

    assert result.ok
    assert Decimal(result.data["total_actual_cost"]) == Decimal("300")
    assert other.last_reconciled.cost.total == Decimal("350")
    assert result.data["actuals_version"] < other.last_reconciled.version


def test_add_subcontractor_tool_reports_balance(db, project_id):
    result = add_subcontractor_entry_tool(
        db=db, project_id=project_id, entry=subcontractor(250, contract_amount=1000), operator_id="Agent",
    )

    assert result.ok
    assert Decimal(result.data["entry"]["balance"]) == Decimal("750")


def test_schema_error_for_bad_payload(db, project_id):
    result = add_labor_entry_tool(db=db, project_id=project_id, entry={"totalCost": "abc"}, operator_id="Agent")

    assert not result.ok
    assert result.error_type is ErrorType.SCHEMA_ERROR
    assert not result.side_effect


def test_input_error_for_unknown_project(db):
    result = get_project_actuals_tool(db=db, project_id="no-such-project", operator_id="Agent")

    assert not result.ok
    assert result.error_type is ErrorType.INPUT_ERROR
    assert "no-such-project" in result.error_message


def test_executor_runs_allowed_tool(executor, db, make_project):
    project_id = make_project(estimate_total=1000)
    executor.execute(
        tool_name="add_labor_entry",
        args={"db": db, "project_id": project_id, "entry": labor(1100), "operator_id": "Agent"},
        allowlist=ALL_TOOLS,
    )
    result = executor.execute(
        tool_name="get_project_actuals",
        args={"db": db, "project_id": project_id, "operator_id": "Agent"},
        allowlist=ALL_TOOLS,
    )

    assert result.ok
    assert Decimal(result.data["cost"]["total"]) == Decimal("1100")
    assert Decimal(result.data["variance"]) == Decimal("100")
    assert Decimal(result.data["variance_percentage"]) == Decimal("10")


def test_executor_blocks_tool_outside_allowlist(executor, db, project_id):
    result = executor.execute(
        tool_name="add_labor_entry",
        args={"db": db, "project_id": project_id, "entry": labor(1), "operator_id": "Agent"},
        allowlist={"get_project_actuals"},
    )

    assert result.error_type is ErrorType.TOOL_NOT_ALLOWED


def test_executor_unknown_tool(executor):
    result = executor.execute(tool_name="drop_everything", args={}, allowlist={"drop_everything"})

    assert not result.ok
    assert result.error_type is ErrorType.SYSTEM_ERROR


def test_executor_wraps_bad_arguments(executor):
    result = executor.execute(tool_name="get_project_actuals", args={"project": "x"}, allowlist=ALL_TOOLS)

    assert not result.ok
    assert result.error_type is ErrorType.SYSTEM_ERROR
