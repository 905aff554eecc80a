# actuals_app/schemas/entries.py
'''
新增实际成本条目的入参
只做结构/类型校验；负数、不存在的 trade_id 等不在这里拦截
字段同时接受 snake_case 和 camelCase（totalCost / total_cost）
'''
import datetime as dt
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from actuals_app.schemas.tags import TradeTag, UnitTag


class EntryInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    trade_id: Optional[str] = None
    notes: Optional[str] = None


def _none_to_zero(value):
    # 可选数值缺省/None 时按 0 处理
    return Decimal("0") if value is None or value == "" else value


class LaborEntryInput(EntryInput):
    date: dt.date
    description: str
    total_cost: Decimal
    trade: TradeTag
    total_hours: Decimal = Decimal("0")
    labor_rate: Decimal = Decimal("0")
    phase: Optional[str] = None
    crew: List[dict] = []

    @field_validator("total_hours", "labor_rate", mode="before")
    @classmethod
    def zero_defaults(cls, value):
        return _none_to_zero(value)


class MaterialEntryInput(EntryInput):
    date: dt.date
    material_name: str
    total_cost: Decimal
    category: TradeTag
    vendor: Optional[str] = None
    invoice_number: Optional[str] = None
    po_number: Optional[str] = None
    quantity: Decimal = Decimal("0")
    unit: UnitTag = UnitTag()
    unit_cost: Decimal = Decimal("0")

    @field_validator("quantity", "unit_cost", mode="before")
    @classmethod
    def zero_defaults(cls, value):
        return _none_to_zero(value)

    @field_validator("unit", mode="before")
    @classmethod
    def default_unit(cls, value):
        return UnitTag() if value is None else value


class SubcontractorEntryInput(EntryInput):
    subcontractor_name: str
    scope_of_work: str
    contract_amount: Decimal
    total_paid: Decimal
    trade: TradeTag
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
