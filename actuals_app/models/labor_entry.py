# actuals_app/models/labor_entry.py
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import String, Numeric, Enum, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from actuals_app.db.base import Base
from actuals_app.db.enums import TradeCategory, enum_values
from actuals_app.models.mixins.base_entry import BaseEntryMixin, DatedEntryMixin


class LaborEntry(Base, BaseEntryMixin, DatedEntryMixin):
    """
    Actual labor cost booked against a project.
    total_cost is supplied by the caller and is not required to equal hours x rate.
    """

    __tablename__ = "labor_entries"

    # =========
    # 🔤 What
    # =========
    trade :Mapped[TradeCategory] = mapped_column(
        Enum(TradeCategory, name="trade_category", values_callable=enum_values),
        nullable=False,
        comment="Trade category",
    )
    trade_label :Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Free-form label when trade is custom",
    )
    description :Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Work description")
    phase :Mapped[Optional[str]] = mapped_column(String(100), nullable=True, comment="e.g. Rough-in, Finish")

    crew :Mapped[List[dict]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Crew members (name/role/hours/rate/cost)",
    )

    # =========
    # 🔢 Hours & cost
    # =========
    total_hours :Mapped[Decimal] = mapped_column(Numeric(12, 5), nullable=False, default=Decimal("0"))
    labor_rate :Mapped[Decimal] = mapped_column(Numeric(12, 5), nullable=False, default=Decimal("0"))
    total_cost :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False, comment="Total labor cost")

    notes :Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<LaborEntry id={self.id} "
            f"project={self.project_id} "
            f"total_cost={self.total_cost}>"
        )
