# actuals_app/models/material_entry.py
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Numeric, Enum, Text
from sqlalchemy.orm import Mapped, mapped_column

from actuals_app.db.base import Base
from actuals_app.db.enums import TradeCategory, UnitType, enum_values
from actuals_app.models.mixins.base_entry import BaseEntryMixin, DatedEntryMixin


class MaterialEntry(Base, BaseEntryMixin, DatedEntryMixin):
    """
    Actual material purchase booked against a project.
    """

    __tablename__ = "material_entries"

    # =========
    # 🔤 Naming & category
    # =========
    material_name :Mapped[str] = mapped_column(String(255), nullable=False, comment="Material name")

    category :Mapped[TradeCategory] = mapped_column(
        Enum(TradeCategory, name="trade_category", values_callable=enum_values),
        nullable=False,
        comment="Trade category",
    )
    category_label :Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Free-form label when category is custom",
    )

    # =========
    # 🔢 Quantity & pricing
    # =========
    quantity :Mapped[Decimal] = mapped_column(Numeric(12, 5), nullable=False, default=Decimal("0"))

    unit :Mapped[UnitType] = mapped_column(
        Enum(UnitType, name="unit_type", values_callable=enum_values),
        nullable=False,
        default=UnitType.each,
    )
    unit_label :Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Free-form label when unit is custom",
    )

    unit_cost :Mapped[Decimal] = mapped_column(Numeric(12, 5), nullable=False, default=Decimal("0"))
    total_cost :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False, comment="Total material cost")

    # =========
    # 🧾 Vendor info
    # =========
    vendor :Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    invoice_number :Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    po_number :Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    notes :Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<MaterialEntry id={self.id} "
            f"name={self.material_name} "
            f"total_cost={self.total_cost}>"
        )
