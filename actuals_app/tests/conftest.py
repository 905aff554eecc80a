from decimal import Decimal
from uuid import uuid4

import pytest

from actuals_app.db.init_db import init_db
from actuals_app.db.session import build_engine, build_session_factory
from actuals_app.models.project import Project
from actuals_app.services.actuals_service import ActualsService
from actuals_app.services.audit_log_service import AuditLogService


@pytest.fixture
def engine(tmp_path):
    # 每个测试一个独立的 sqlite 文件库，多个 session 之间走不同连接
    engine = build_engine(f"sqlite:///{tmp_path / 'actuals.db'}", busy_timeout=10)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def service(db):
    return ActualsService(db=db, audit_log_service=AuditLogService(db))


@pytest.fixture
def make_project(session_factory):
    def _make(name="Maple St. remodel", estimate_total=None) -> str:
        session = session_factory()
        try:
            project = Project(
                id=str(uuid4()),
                name=name,
                estimate_total=Decimal(str(estimate_total)) if estimate_total is not None else None,
            )
            session.add(project)
            session.commit()
            return project.id
        finally:
            session.close()
    return _make


@pytest.fixture
def project_id(make_project):
    return make_project()
