from datetime import datetime

import pandas as pd
from sqlalchemy.orm import Session

from actuals_app.db.enums import CategoryGroup
from actuals_app.errors import ProjectNotFoundError
from actuals_app.schemas.dto.entry_dto import LaborEntryDTO, MaterialEntryDTO, SubcontractorEntryDTO
from actuals_app.services.actuals_aggregator import compute_group_breakdown
from actuals_app.services.actuals_service import ActualsService
from actuals_app.logger import get_logger

logger = get_logger(__name__)


class ActualsReportService:
    """
    Build a human-readable actual-cost / variance report as a DataFrame.

    The report is built from a freshly reconciled snapshot: entry rows come
    from the snapshot's cached lists, so rows and subtotals always agree even
    when other callers add entries meanwhile. Apart from that recompute
    nothing is persisted.
    """

    def __init__(self, db: Session, actuals_service: ActualsService):
        self.db = db
        self.actuals_service = actuals_service

    def generate_df_report(self, project_id: str) -> pd.DataFrame:
        self.actuals_service.get_project_actuals(project_id)
        snapshot = self.actuals_service.last_reconciled
        project = self.actuals_service.project_store.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)

        # 明细与小计出自同一次重算，不再单独查询条目表
        labors = [LaborEntryDTO.model_validate(d) for d in snapshot.labor_entries]
        materials = [MaterialEntryDTO.model_validate(d) for d in snapshot.material_entries]
        subs = [SubcontractorEntryDTO.model_validate(d) for d in snapshot.subcontractor_entries]

        #累加行构造DataFrame
        rows = []

        #项目信息
        rows.append(["Project Actuals Report"])
        rows.append(["Project", project.name])
        rows.append(["Project ID", project.id])
        rows.append(["", ""])

        #人工明细
        rows.append(["1. Labor"])
        rows.append(["Date", "Trade", "Description", "Hours", "Rate", "Total"])
        for l in labors:
            rows.append([
                l.date,
                l.trade,
                l.description,
                l.total_hours,
                l.labor_rate,
                l.total_cost,
            ])
        rows.append(["Subtotal", "", "", "", "", snapshot.cost.labor])
        rows.append(["", ""])

        #材料明细
        rows.append(["2. Material"])
        rows.append(["Date", "Material", "Category", "Quantity", "Unit", "Unit cost", "Total", "Vendor", "Invoice"])
        for m in materials:
            rows.append([
                m.date,
                m.material_name,
                m.category,
                m.quantity,
                m.unit,
                m.unit_cost,
                m.total_cost,
                m.vendor or "",
                m.invoice_number or "",
            ])
        rows.append(["Subtotal", "", "", "", "", "", snapshot.cost.material, "", ""])
        rows.append(["", ""])

        #分包明细
        rows.append(["3. Subcontractors"])
        rows.append(["Company", "Trade", "Scope", "Contract", "Paid", "Balance"])
        for s in subs:
            rows.append([
                s.subcontractor.company,
                s.trade,
                s.scope_of_work,
                s.contract_amount,
                s.total_paid,
                s.balance,
            ])
        rows.append(["Subtotal", "", "", "", snapshot.cost.subcontractor, ""])
        rows.append(["", ""])

        #按类别分组
        rows.append(["4. By category group"])
        breakdown = compute_group_breakdown(labors, materials, subs)
        for group in CategoryGroup:
            rows.append([group.value, breakdown[group]])
        rows.append(["", ""])

        #汇总
        rows.append(["Estimate", project.estimate_total if project.estimate_total is not None else "n/a"])
        rows.append(["Actual", snapshot.cost.total])
        rows.append(["Variance", snapshot.variance])
        rows.append(["Variance %", snapshot.variance_percentage])
        rows.append(["Report date", datetime.now().strftime("%Y.%m.%d")])

        logger.info(
            f"[report] project={project_id} labor={len(labors)} material={len(materials)} subcontractor={len(subs)}"
        )
        #构造DataFrame返回
        return pd.DataFrame(rows)
