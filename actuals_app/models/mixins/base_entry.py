# actuals_app/models/mixins/base_entry.py
import datetime as dt
from typing import Optional

from sqlalchemy import String, Date, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, declared_attr

from actuals_app.db.enums import CategoryGroup, enum_values


class BaseEntryMixin:
    """
    Base mixin for all actual cost entries (labor / material / subcontractor).

    Invariants:
    - Immutable identity
    - Belongs to exactly one project
    - group is derived from the entry's trade category at write time
    """
    # =========
    # Identity & ownership
    # =========
    id :Mapped[str] = mapped_column(String(36), primary_key=True, comment="Entry UUID")

    @declared_attr
    def project_id(cls) -> Mapped[str]:
        return mapped_column(
            String(36),
            ForeignKey("projects.id"),
            nullable=False,
            index=True,
            comment="Associated project ID",
        )

    trade_id :Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        comment="Estimated trade this entry is booked against",
    )

    @declared_attr
    def group(cls) -> Mapped[CategoryGroup]:
        return mapped_column(
            Enum(CategoryGroup, name="category_group", values_callable=enum_values),
            nullable=False,
            default=CategoryGroup.other,
            comment="Category group derived from the trade category",
        )

    # =========
    # ⏱ Timestamps
    # =========
    created_at :Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp",
    )


class DatedEntryMixin:
    date :Mapped[dt.date] = mapped_column(Date, nullable=False, comment="Date the cost was incurred")
