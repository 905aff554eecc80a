import datetime as dt
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel

from actuals_app.models.labor_entry import LaborEntry
from actuals_app.models.material_entry import MaterialEntry
from actuals_app.models.subcontractor_entry import SubcontractorEntry


def _label(kind, label: Optional[str]) -> str:
    return label if label else kind.value


class LaborEntryDTO(BaseModel):
    id: str
    project_id: str
    trade_id: Optional[str] = None
    date: dt.date
    trade: str
    group: str
    description: str
    phase: Optional[str] = None
    crew: List[dict] = []
    total_hours: Decimal
    labor_rate: Decimal
    total_cost: Decimal
    notes: Optional[str] = None
    created_at: dt.datetime

    @classmethod
    def from_orm_model(cls, entry: LaborEntry) -> "LaborEntryDTO":
        return cls(
            id=entry.id,
            project_id=entry.project_id,
            trade_id=entry.trade_id,
            date=entry.date,
            trade=_label(entry.trade, entry.trade_label),
            group=entry.group.value,
            description=entry.description,
            phase=entry.phase,
            crew=entry.crew or [],
            total_hours=entry.total_hours,
            labor_rate=entry.labor_rate,
            total_cost=entry.total_cost,
            notes=entry.notes,
            created_at=entry.created_at,
        )


class MaterialEntryDTO(BaseModel):
    id: str
    project_id: str
    trade_id: Optional[str] = None
    date: dt.date
    material_name: str
    category: str
    group: str
    quantity: Decimal
    unit: str
    unit_cost: Decimal
    total_cost: Decimal
    vendor: Optional[str] = None
    invoice_number: Optional[str] = None
    po_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: dt.datetime

    @classmethod
    def from_orm_model(cls, entry: MaterialEntry) -> "MaterialEntryDTO":
        return cls(
            id=entry.id,
            project_id=entry.project_id,
            trade_id=entry.trade_id,
            date=entry.date,
            material_name=entry.material_name,
            category=_label(entry.category, entry.category_label),
            group=entry.group.value,
            quantity=entry.quantity,
            unit=_label(entry.unit, entry.unit_label),
            unit_cost=entry.unit_cost,
            total_cost=entry.total_cost,
            vendor=entry.vendor,
            invoice_number=entry.invoice_number,
            po_number=entry.po_number,
            notes=entry.notes,
            created_at=entry.created_at,
        )


class SubcontractorInfoDTO(BaseModel):
    name: str
    company: str
    email: Optional[str] = None
    phone: Optional[str] = None


class SubcontractorEntryDTO(BaseModel):
    id: str
    project_id: str
    trade_id: Optional[str] = None
    subcontractor: SubcontractorInfoDTO
    trade: str
    group: str
    scope_of_work: str
    contract_amount: Decimal
    payments: List[dict] = []
    total_paid: Decimal
    balance: Decimal
    notes: Optional[str] = None
    created_at: dt.datetime

    @classmethod
    def from_orm_model(cls, entry: SubcontractorEntry) -> "SubcontractorEntryDTO":
        return cls(
            id=entry.id,
            project_id=entry.project_id,
            trade_id=entry.trade_id,
            subcontractor=SubcontractorInfoDTO(
                name=entry.subcontractor_name,
                company=entry.company,
                email=entry.email,
                phone=entry.phone,
            ),
            trade=_label(entry.trade, entry.trade_label),
            group=entry.group.value,
            scope_of_work=entry.scope_of_work,
            contract_amount=entry.contract_amount,
            payments=entry.payments or [],
            total_paid=entry.total_paid,
            balance=entry.balance,
            notes=entry.notes,
            created_at=entry.created_at,
        )


ENTRY_DTO_BY_MODEL = {
    LaborEntry: LaborEntryDTO,
    MaterialEntry: MaterialEntryDTO,
    SubcontractorEntry: SubcontractorEntryDTO,
}


def entry_to_dto(entry) -> BaseModel:
    return ENTRY_DTO_BY_MODEL[type(entry)].from_orm_model(entry)
