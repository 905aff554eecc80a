from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel

from actuals_app.models.project_actuals import ProjectActuals


class ActualsBreakdownDTO(BaseModel):
    labor: Decimal
    material: Decimal
    subcontractor: Decimal
    total: Decimal


class ProjectActualsDTO(BaseModel):
    id: str
    project_id: str
    version: int

    cost: ActualsBreakdownDTO
    variance: Decimal
    variance_percentage: Decimal

    labor_entries: List[dict] = []
    material_entries: List[dict] = []
    subcontractor_entries: List[dict] = []
    daily_logs: List[dict] = []
    change_orders: List[dict] = []

    reconciled_at: Optional[datetime] = None

    @classmethod
    def from_domain_model(cls, actuals: ProjectActuals) -> "ProjectActualsDTO":
        return cls(
            id=actuals.id,
            project_id=actuals.project_id,
            version=actuals.version,
            cost=ActualsBreakdownDTO(
                labor=actuals.total_labor_cost or 0,
                material=actuals.total_material_cost or 0,
                subcontractor=actuals.total_subcontractor_cost or 0,
                total=actuals.total_actual_cost or 0,
            ),
            variance=actuals.variance or 0,
            variance_percentage=actuals.variance_percentage or 0,
            labor_entries=actuals.labor_entries or [],
            material_entries=actuals.material_entries or [],
            subcontractor_entries=actuals.subcontractor_entries or [],
            daily_logs=actuals.daily_logs or [],
            change_orders=actuals.change_orders or [],
            reconciled_at=actuals.reconciled_at,
        )
