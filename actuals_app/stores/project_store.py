# actuals_app/stores/project_store.py
from typing import Optional, Dict, Any

from sqlalchemy import select
from sqlalchemy.orm import Session

import actuals_app.models.registry  # noqa: F401
from actuals_app.errors import ProjectNotFoundError
from actuals_app.models.project import Project
from actuals_app.models.project_actuals import ProjectActuals
from actuals_app.stores.store_errors import store_call


class ProjectStore:
    """
    Persistence adapter for projects and their single ProjectActuals record.
    Projects themselves are created and owned elsewhere.
    """

    def __init__(self, db: Session):
        self.db = db

    @store_call
    def get_by_id(self, project_id: str) -> Optional[Project]:
        return self.db.get(Project, project_id)

    @store_call
    def update(self, project_id: str, partial: Dict[str, Any]) -> Project:
        project = self.db.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        for field, value in partial.items():
            if not hasattr(Project, field):
                raise ValueError(f"Project has no field '{field}'")
            setattr(project, field, value)
        return project

    @store_call
    def get_actuals(self, project_id: str) -> Optional[ProjectActuals]:
        '''
        读取项目当前的 actuals 记录（总是从数据库重新加载，带上最新 version）
        '''
        stmt = (
            select(ProjectActuals)
            .where(ProjectActuals.project_id == project_id)
            .execution_options(populate_existing=True)
        )
        return self.db.scalars(stmt).one_or_none()

    @store_call
    def create_actuals(self, actuals: ProjectActuals) -> ProjectActuals:
        # project_id 唯一约束：并发初始化时后到者在 flush 时拿到 IntegrityError
        self.db.add(actuals)
        self.db.flush()
        return actuals
