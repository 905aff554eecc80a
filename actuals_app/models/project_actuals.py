# actuals_app/models/project_actuals.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import String, Numeric, Integer, DateTime, JSON, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from actuals_app.db.base import Base

if TYPE_CHECKING:
    from actuals_app.models.project import Project


class ProjectActuals(Base):
    """
    Materialized actual-cost summary of one project.

    The entry lists are a denormalized read cache refreshed on every recompute;
    the entry tables stay the source of truth.
    Every write is guarded by `version` (optimistic concurrency).
    """

    __tablename__ = "project_actuals"

    # =========
    # 🔒 Identity & ownership
    # =========
    id :Mapped[str] = mapped_column(String(36), primary_key=True, comment="ProjectActuals UUID")

    project_id :Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id"),
        nullable=False,
        unique=True,
        comment="Project ID, at most one actuals record per project",
    )

    version :Mapped[int] = mapped_column(Integer, nullable=False, comment="Optimistic concurrency version")

    # =========
    # 📎 Cached entries (as of last recompute)
    # =========
    labor_entries :Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    material_entries :Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    subcontractor_entries :Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)

    # =========
    # 💰 Derived totals
    # =========
    total_labor_cost :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False, default=Decimal("0"))
    total_material_cost :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False, default=Decimal("0"))
    total_subcontractor_cost :Mapped[Decimal] = mapped_column(Numeric(14, 5), nullable=False, default=Decimal("0"))
    total_actual_cost :Mapped[Decimal] = mapped_column(Numeric(16, 5), nullable=False, default=Decimal("0"))

    # positive = over budget
    variance :Mapped[Decimal] = mapped_column(Numeric(16, 5), nullable=False, default=Decimal("0"))
    variance_percentage :Mapped[Decimal] = mapped_column(Numeric(12, 5), nullable=False, default=Decimal("0"))

    # =========
    # 📓 Not touched by reconciliation
    # =========
    daily_logs :Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    change_orders :Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)

    # =========
    # ⏱ Timestamps
    # =========
    created_at :Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    reconciled_at :Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Last time totals were recomputed from the entry tables",
    )

    project :Mapped["Project"] = relationship(back_populates="actuals")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<ProjectActuals id={self.id} "
            f"project={self.project_id} "
            f"version={self.version} "
            f"total={self.total_actual_cost}>"
        )
