'''
并发写入：乐观锁冲突后重跑，不丢条目
sqlite 文件库 + 多个 session（各自独立连接）
'''
import threading
from decimal import Decimal

import pytest
from sqlalchemy.orm.exc import StaleDataError

from actuals_app.errors import ConcurrentUpdateConflictError
from actuals_app.services.actuals_service import ActualsService
from actuals_app.services.audit_log_service import AuditLogService
from actuals_app.tests.payloads import labor


def _service(session, **kwargs):
    return ActualsService(db=session, audit_log_service=AuditLogService(session), **kwargs)


def test_recompute_retries_when_snapshot_overtaken(session_factory, project_id, monkeypatch):
    db_a, db_b = session_factory(), session_factory()
    try:
        service_a, service_b = _service(db_a), _service(db_b)
        service_a.initialize(project_id)

        real_lookup = service_a.labor_store.list_by_project
        reads = []

        def list_then_interleave(pid):
            result = real_lookup(pid)
            reads.append(len(result))
            if len(reads) == 1:
                # A 已读完条目、尚未写回：B 完整地新增一条并提交
                service_b.add_labor_entry(pid, labor(200))
            return result

        monkeypatch.setattr(service_a.labor_store, "list_by_project", list_then_interleave)
        actuals = service_a.recompute(project_id)

        # 第一次写回版本过期被回滚，第二次读到了 B 的条目
        assert reads == [0, 1]
        assert actuals.total_labor_cost == Decimal("200")
        assert actuals.version == 3
    finally:
        db_a.close()
        db_b.close()


def test_gives_up_after_max_retries(session_factory, project_id, monkeypatch):
    db_a, db_b = session_factory(), session_factory()
    try:
        service_a, service_b = _service(db_a, max_retries=2), _service(db_b)
        service_a.initialize(project_id)

        real_lookup = service_a.labor_store.list_by_project

        def always_interleave(pid):
            result = real_lookup(pid)
            service_b.add_labor_entry(pid, labor(10))
            return result

        monkeypatch.setattr(service_a.labor_store, "list_by_project", always_interleave)
        with pytest.raises(ConcurrentUpdateConflictError) as exc_info:
            service_a.recompute(project_id)
        monkeypatch.undo()

        assert exc_info.value.attempts == 2
        # B 的两次新增都已提交，A 放弃后快照仍与条目一致
        assert len(service_a.get_project_labor_entries(project_id)) == 2
        assert service_a.get_project_actuals(project_id).total_labor_cost == Decimal("20")
    finally:
        db_a.close()
        db_b.close()


def test_conflict_on_add_rolls_back_the_entry(service, project_id, monkeypatch):
    service.initialize(project_id)
    attempts = []

    def overtaken(project):
        attempts.append(project.id)
        raise StaleDataError("simulated concurrent snapshot write")

    monkeypatch.setattr(service, "_reconcile", overtaken)
    with pytest.raises(ConcurrentUpdateConflictError):
        service.add_labor_entry(project_id, labor(50))
    monkeypatch.undo()

    assert len(attempts) == service.max_retries
    assert service.get_project_labor_entries(project_id) == []
    assert service.get_project_actuals(project_id).total_actual_cost == 0


def test_racing_initialize_keeps_single_record(session_factory, project_id, monkeypatch):
    db_a, db_b = session_factory(), session_factory()
    try:
        service_a, service_b = _service(db_a), _service(db_b)

        real_lookup = service_a.project_store.get_actuals
        lookups = []

        def missed_then_real(pid):
            lookups.append(pid)
            if len(lookups) == 1:
                # A 查询时还没有记录，随后 B 抢先创建并提交
                service_b.initialize(pid)
                return None
            return real_lookup(pid)

        monkeypatch.setattr(service_a.project_store, "get_actuals", missed_then_real)
        actuals_a = service_a.initialize(project_id)
        actuals_b = service_b.initialize(project_id)

        assert actuals_a.id == actuals_b.id
        assert len(lookups) == 2
    finally:
        db_a.close()
        db_b.close()


def test_parallel_adds_lose_no_entry(session_factory, project_id):
    workers, per_worker = 4, 3
    barrier = threading.Barrier(workers)
    errors = []
    created = []

    def worker(n):
        session = session_factory()
        try:
            service = _service(session, max_retries=5)
            barrier.wait()
            for i in range(per_worker):
                entry = service.add_labor_entry(project_id, labor(Decimal("12.50"), description=f"w{n}-{i}"))
                created.append(entry.id)
        except Exception as e:  # 汇总到主线程断言
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []

    session = session_factory()
    try:
        service = _service(session)
        entries = service.get_project_labor_entries(project_id)
        actuals = service.get_project_actuals(project_id)

        assert sorted(e.id for e in entries) == sorted(created)
        assert len(entries) == workers * per_worker
        assert actuals.total_labor_cost == Decimal("12.50") * workers * per_worker
        assert len(actuals.labor_entries) == workers * per_worker
    finally:
        session.close()


def test_first_adds_racing_on_initialize_keep_both_entries(session_factory, project_id, monkeypatch):
    db_a, db_b = session_factory(), session_factory()
    try:
        service_a, service_b = _service(db_a), _service(db_b)

        real_lookup = service_a.project_store.get_actuals
        lookups = []

        def missed_then_real(pid):
            lookups.append(pid)
            if len(lookups) == 1:
                # A 认为还没有 actuals；B 抢先新增第一条并提交（顺带创建了 actuals）
                service_b.add_labor_entry(pid, labor(100))
                return None
            return real_lookup(pid)

        monkeypatch.setattr(service_a.project_store, "get_actuals", missed_then_real)
        entry_a = service_a.add_labor_entry(project_id, labor(50))
        monkeypatch.undo()

        entries = service_a.get_project_labor_entries(project_id)
        actuals = service_a.get_project_actuals(project_id)

        assert entry_a.id in {e.id for e in entries}
        assert len(entries) == 2
        assert actuals.total_labor_cost == Decimal("150")
        assert len(actuals.labor_entries) == 2
    finally:
        db_a.close()
        db_b.close()


def test_single_attempt_when_max_retries_is_one(db, project_id, monkeypatch):
    single = _service(db, max_retries=1)
    single.initialize(project_id)
    attempts = []

    def overtaken(project):
        attempts.append(project.id)
        raise StaleDataError("simulated concurrent snapshot write")

    monkeypatch.setattr(single, "_reconcile", overtaken)
    with pytest.raises(ConcurrentUpdateConflictError) as exc_info:
        single.recompute(project_id)

    assert single.max_retries == 1
    assert len(attempts) == 1
    assert exc_info.value.attempts == 1


def test_max_retries_below_one_rejected(db):
    with pytest.raises(ValueError):
        _service(db, max_retries=0)


def test_last_reconciled_is_the_callers_own_write(session_factory, project_id):
    db_a, db_b = session_factory(), session_factory()
    try:
        service_a, service_b = _service(db_a), _service(db_b)
        service_a.add_labor_entry(project_id, labor(100))
        service_b.add_labor_entry(project_id, labor(50))

        # A 的快照停在自己那次写回，不跟着 B 的提交变化
        assert service_a.last_reconciled.cost.total == Decimal("100")
        assert service_b.last_reconciled.cost.total == Decimal("150")
        assert service_b.last_reconciled.version > service_a.last_reconciled.version
        assert len(service_a.last_reconciled.labor_entries) == 1
    finally:
        db_a.close()
        db_b.close()
