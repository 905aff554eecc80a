# actuals_app/services/actuals_aggregator.py
'''
实际成本聚合：纯函数，无 I/O
金额统一用 Decimal 累加，结果与条目顺序无关、可复现
'''
from decimal import Decimal
from typing import Iterable, Dict

from pydantic import BaseModel

from actuals_app.db.enums import CategoryGroup

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class ActualsTotals(BaseModel):
    total_labor_cost: Decimal = ZERO
    total_material_cost: Decimal = ZERO
    total_subcontractor_cost: Decimal = ZERO
    total_actual_cost: Decimal = ZERO


class VarianceResult(BaseModel):
    variance: Decimal = ZERO
    variance_percentage: Decimal = ZERO


def _to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # float 先转 str，避免把二进制误差带进 Decimal
    return Decimal(str(value))


def _sum_field(entries: Iterable, field: str) -> Decimal:
    total = ZERO
    for entry in entries:
        total += _to_decimal(getattr(entry, field))
    return total


def compute_totals(labor: Iterable, material: Iterable, subcontractor: Iterable) -> ActualsTotals:
    '''
    汇总三类条目
    - labor / material 取 total_cost
    - subcontractor 取 total_paid（已付金额，而不是合同金额）
    空集合合计为 0
    '''
    total_labor_cost = _sum_field(labor, "total_cost")
    total_material_cost = _sum_field(material, "total_cost")
    total_subcontractor_cost = _sum_field(subcontractor, "total_paid")

    return ActualsTotals(
        total_labor_cost=total_labor_cost,
        total_material_cost=total_material_cost,
        total_subcontractor_cost=total_subcontractor_cost,
        total_actual_cost=total_labor_cost + total_material_cost + total_subcontractor_cost,
    )


def compute_variance(total_actual_cost, estimated_cost) -> VarianceResult:
    '''
    variance = actual - estimate（正数 = 超预算）
    estimate <= 0 时百分比固定为 0，不做除法
    '''
    actual = _to_decimal(total_actual_cost)
    estimate = _to_decimal(estimated_cost)

    variance = actual - estimate
    if estimate > ZERO:
        variance_percentage = variance / estimate * HUNDRED
    else:
        variance_percentage = ZERO

    return VarianceResult(variance=variance, variance_percentage=variance_percentage)


def compute_group_breakdown(labor: Iterable, material: Iterable, subcontractor: Iterable) -> Dict[CategoryGroup, Decimal]:
    """Actual cost per category group; every group is present, zero when unused."""
    breakdown = {group: ZERO for group in CategoryGroup}
    for entries, field in ((labor, "total_cost"), (material, "total_cost"), (subcontractor, "total_paid")):
        for entry in entries:
            group = entry.group if isinstance(entry.group, CategoryGroup) else CategoryGroup(entry.group)
            breakdown[group] += _to_decimal(getattr(entry, field))
    return breakdown
