from decimal import Decimal

import pandas as pd
import pytest

from actuals_app.errors import ProjectNotFoundError
from actuals_app.services.actuals_report_service import ActualsReportService
from actuals_app.services.actuals_service import ActualsService
from actuals_app.services.audit_log_service import AuditLogService
from actuals_app.tests.payloads import labor, material, subcontractor


def _value(df: pd.DataFrame, label: str):
    row = df[df[0] == label]
    assert len(row) == 1, f"expected one '{label}' row"
    return row.iloc[0, 1]


def test_report_sections_and_summary(db, service, make_project):
    project_id = make_project(name="Oak Ave ADU", estimate_total=1000)
    service.add_labor_entry(project_id, labor(300))
    service.add_material_entry(project_id, material(400, category="Tile"))
    service.add_subcontractor_entry(project_id, subcontractor(500))

    df = ActualsReportService(db, service).generate_df_report(project_id)

    assert isinstance(df, pd.DataFrame)
    assert _value(df, "Project") == "Oak Ave ADU"
    assert {"1. Labor", "2. Material", "3. Subcontractors", "4. By category group"} <= set(df[0])
    assert Decimal(_value(df, "Actual")) == Decimal("1200")
    assert Decimal(_value(df, "Variance")) == Decimal("200")
    assert Decimal(_value(df, "Variance %")) == Decimal("20")
    # 自定义类别显示原文
    assert "Tile" in set(df[2])
    assert Decimal(_value(df, "mep")) == Decimal("800")


def test_report_without_estimate(db, service, project_id):
    df = ActualsReportService(db, service).generate_df_report(project_id)

    assert _value(df, "Estimate") == "n/a"
    assert Decimal(_value(df, "Actual")) == 0


def test_report_unknown_project(db, service):
    with pytest.raises(ProjectNotFoundError):
        ActualsReportService(db, service).generate_df_report("no-such-project")


def test_report_rows_match_subtotals_under_concurrent_add(db, service, session_factory, project_id, monkeypatch):
    service.add_labor_entry(project_id, labor(300))
    other_db = session_factory()
    try:
        other = ActualsService(db=other_db, audit_log_service=AuditLogService(other_db))
        real_lookup = service.project_store.get_by_id
        lookups = []

        def lookup_then_interleave(pid):
            lookups.append(pid)
            if len(lookups) == 2:
                # 重算已提交，报表还没组装：另一个调用方新增一条人工
                other.add_labor_entry(pid, labor(50, description="late crew"))
            return real_lookup(pid)

        monkeypatch.setattr(service.project_store, "get_by_id", lookup_then_interleave)
        df = ActualsReportService(db, service).generate_df_report(project_id)
    finally:
        other_db.close()

    labels = list(df[0])
    start = labels.index("1. Labor") + 2
    end = labels.index("Subtotal", start)
    labor_rows = df.iloc[start:end]

    assert len(lookups) == 2
    assert len(labor_rows) == 1
    assert Decimal(df.iloc[end, 5]) == Decimal("300")
    assert sum(Decimal(v) for v in labor_rows[5]) == Decimal(df.iloc[end, 5])
    assert Decimal(_value(df, "Actual")) == Decimal("300")
