# actuals_app/models/subcontractor_entry.py
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import String, Numeric, Enum, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from actuals_app.db.base import Base
from actuals_app.db.enums import TradeCategory, enum_values
from actuals_app.models.mixins.base_entry import BaseEntryMixin


class SubcontractorEntry(Base, BaseEntryMixin):
    """
    Subcontract booked against a project.

    total_paid and balance are authoritative as written:
    balance = contract_amount - total_paid at write time, never derived from payments.
    """

    __tablename__ = "subcontractor_entries"

    # =========
    # 👷 Who
    # =========
    subcontractor_name :Mapped[str] = mapped_column(String(255), nullable=False)
    company :Mapped[str] = mapped_column(String(255), nullable=False, comment="Defaults to subcontractor_name")
    email :Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone :Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # =========
    # 🔤 What
    # =========
    trade :Mapped[TradeCategory] = mapped_column(
        Enum(TradeCategory, name="trade_category", values_callable=enum_values),
        nullable=False,
    )
    trade_label :Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    scope_of_work :Mapped[str] = mapped_column(Text, nullable=False, default="")

    # =========
    # 💰 Contract & payments
    # =========
    contract_amount :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False)
    payments :Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    total_paid :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False)
    balance :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False)

    notes :Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<SubcontractorEntry id={self.id} "
            f"company={self.company} "
            f"total_paid={self.total_paid}>"
        )
