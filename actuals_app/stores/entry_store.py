# actuals_app/stores/entry_store.py
from typing import Optional, List, Type, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

import actuals_app.models.registry  # noqa: F401
from actuals_app.models.labor_entry import LaborEntry
from actuals_app.models.material_entry import MaterialEntry
from actuals_app.models.subcontractor_entry import SubcontractorEntry
from actuals_app.stores.store_errors import store_call

Entry = Union[LaborEntry, MaterialEntry, SubcontractorEntry]


class EntryStore:
    """
    Persistence adapter for one entry kind (labor / material / subcontractor).
    Writes are flushed, never committed: the caller owns the transaction.
    """

    def __init__(self, db: Session, model: Type[Entry]):
        self.db = db
        self.model = model

    @property
    def kind(self) -> str:
        return self.model.__name__

    @store_call
    def create(self, entry: Entry) -> Entry:
        if not isinstance(entry, self.model):
            raise TypeError(f"{self.kind} store cannot hold {type(entry).__name__}")
        self.db.add(entry)
        self.db.flush()
        return entry

    @store_call
    def get_by_id(self, entry_id: str) -> Optional[Entry]:
        return self.db.get(self.model, entry_id)

    @store_call
    def list_by_project(self, project_id: str) -> List[Entry]:
        '''
        按创建时间（再按 id）排序返回项目下全部条目
        项目不存在时返回空列表，不报错
        '''
        stmt = (
            select(self.model)
            .where(self.model.project_id == project_id)
            .order_by(self.model.created_at, self.model.id)
            .execution_options(populate_existing=True)
        )
        return list(self.db.scalars(stmt).all())

    @store_call
    def delete(self, entry: Entry) -> None:
        self.db.delete(entry)
        self.db.flush()
