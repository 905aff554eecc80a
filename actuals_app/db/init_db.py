from typing import Optional

from sqlalchemy.engine import Engine

from actuals_app.db.session import get_engine
from actuals_app.db.base import Base
import actuals_app.models.registry  # noqa: F401  注册所有表


def init_db(engine: Optional[Engine] = None):
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
