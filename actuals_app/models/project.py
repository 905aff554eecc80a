# actuals_app/models/project.py
from actuals_app.db.base import Base
from datetime import datetime
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, DateTime, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from actuals_app.models.project_actuals import ProjectActuals


class Project(Base):
    """
    Project record owned by the surrounding application.
    The actuals engine only reads estimate_total and reads/writes actuals.
    """
    __tablename__ = "projects"

    # =========
    # 🔒 Immutable facts
    # =========
    id :Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment = 'Project UUID')
    name : Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment = 'Project name')
    created_at : Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment = 'Creation timestamp')

    # =========
    # 📐 Estimate (maintained by the estimate workflow)
    # =========
    estimate_total : Mapped[Optional[Decimal]] = mapped_column(
        Numeric(16, 5),
        nullable=True,
        comment="Total of the current estimate, NULL when the project has no estimate",
    )

    # =========
    # 🔁 System maintained fields
    # =========
    updated_at : Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Last update timestamp",
    )

    actuals : Mapped[Optional["ProjectActuals"]] = relationship(
        back_populates="project",
        uselist=False,
    )

    @property
    def estimated_cost(self) -> Decimal:
        return Decimal(self.estimate_total) if self.estimate_total is not None else Decimal("0")

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name}>"
