# actuals_app/services/actuals_service.py
import datetime as dt
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union
from uuid import uuid4

from pydantic.alias_generators import to_snake
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from actuals_app.config import get_settings
from actuals_app.db.enums import AuditEntityType
from actuals_app.errors import (
    ActualsNotFoundError,
    ConcurrentUpdateConflictError,
    EntryNotFoundError,
    ProjectNotFoundError,
    StoreUnavailableError,
)
from actuals_app.logger import get_logger
from actuals_app.models.labor_entry import LaborEntry
from actuals_app.models.material_entry import MaterialEntry
from actuals_app.models.project import Project
from actuals_app.models.project_actuals import ProjectActuals
from actuals_app.models.subcontractor_entry import SubcontractorEntry
from actuals_app.schemas.dto.entry_dto import entry_to_dto
from actuals_app.schemas.dto.project_actuals_dto import ProjectActualsDTO
from actuals_app.schemas.entries import LaborEntryInput, MaterialEntryInput, SubcontractorEntryInput
from actuals_app.schemas.tags import TradeTag, UnitTag
from actuals_app.services.actuals_aggregator import compute_totals, compute_variance, ZERO
from actuals_app.services.audit_log_service import AuditLogService, SYSTEM_OPERATOR
from actuals_app.stores.entry_store import EntryStore
from actuals_app.stores.project_store import ProjectStore
from actuals_app.stores.store_errors import STORE_FAILURES

logger = get_logger(__name__)

T = TypeVar("T")


class _ActualsInitRace(Exception):
    """Another writer created the project's actuals first (unique project_id)."""


# 每类条目允许人工修改的字段（白名单）
EDITABLE_FIELDS = {
    LaborEntry: {
        "date", "description", "total_cost", "total_hours", "labor_rate",
        "trade", "trade_id", "phase", "notes",
    },
    MaterialEntry: {
        "date", "material_name", "total_cost", "quantity", "unit", "unit_cost",
        "category", "trade_id", "vendor", "invoice_number", "po_number", "notes",
    },
    SubcontractorEntry: {
        "subcontractor_name", "company", "email", "phone", "scope_of_work",
        "contract_amount", "total_paid", "trade", "trade_id", "notes",
    },
}

DECIMAL_FIELDS = {
    "total_cost", "total_hours", "labor_rate", "quantity", "unit_cost",
    "contract_amount", "total_paid",
}

AUDIT_TYPE_BY_MODEL = {
    LaborEntry: AuditEntityType.LaborEntry,
    MaterialEntry: AuditEntityType.MaterialEntry,
    SubcontractorEntry: AuditEntityType.SubcontractorEntry,
}


class ActualsService:
    """
    Keeps each project's ProjectActuals consistent with its entries.

    Responsibilities:
    - Lazily create the single ProjectActuals record of a project
    - Write entries and recompute the aggregate in the same transaction
    - Recompute = read all entries, aggregate, rewrite the snapshot (no deltas)

    Concurrency: optimistic. ProjectActuals.version is checked on every snapshot
    write; a lost race rolls the whole transaction back and the sequence is
    re-run, at most `max_retries` times.

    Unlike the other services this one commits: a retry is only possible
    when it owns the transaction boundary.
    """

    def __init__(
        self,
        db: Session,
        audit_log_service: AuditLogService,
        *,
        max_retries: Optional[int] = None,
    ):
        self.db = db
        self.audit_log_service = audit_log_service
        self.project_store = ProjectStore(db)
        self.labor_store = EntryStore(db, LaborEntry)
        self.material_store = EntryStore(db, MaterialEntry)
        self.subcontractor_store = EntryStore(db, SubcontractorEntry)
        if max_retries is None:
            max_retries = get_settings().max_reconcile_retries
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self.max_retries = max_retries
        # 最近一次成功提交的重算快照：写回时捕获，不受之后其他调用方的写入影响
        self.last_reconciled: Optional[ProjectActualsDTO] = None
        self._pending_snapshot: Optional[ProjectActualsDTO] = None

    # =========
    # Lifecycle
    # =========
    def initialize(self, project_id: str, *, operator_id: str = SYSTEM_OPERATOR) -> ProjectActuals:
        '''
        确保项目存在 actuals 记录；已存在则原样返回（不会清零）

        :param project_id: 项目ID
        :raises ProjectNotFoundError: 项目不存在
        '''
        def work() -> ProjectActuals:
            project = self._require_project(project_id)
            return self._ensure_actuals(project, operator_id)

        return self._run_in_transaction(project_id, work)

    def recompute(self, project_id: str) -> ProjectActuals:
        '''
        从条目表重新汇总并覆盖写回 actuals

        :raises ProjectNotFoundError: 项目不存在
        :raises ActualsNotFoundError: 项目还没有 actuals（先调用 initialize）
        '''
        def work() -> ProjectActuals:
            project = self._require_project(project_id)
            return self._reconcile(project)

        return self._run_in_transaction(project_id, work)

    def get_project_actuals(self, project_id: str, *, operator_id: str = SYSTEM_OPERATOR) -> ProjectActuals:
        '''
        读取 actuals，读取前总是重算，不信任缓存快照
        （条目可能由不触发重算的渠道写入，例如外部导入）
        '''
        def work() -> ProjectActuals:
            project = self._require_project(project_id)
            self._ensure_actuals(project, operator_id)
            return self._reconcile(project)

        return self._run_in_transaction(project_id, work)

    # =========
    # Add entries
    # =========
    def add_labor_entry(
        self,
        project_id: str,
        data: Union[LaborEntryInput, Mapping[str, Any]],
        *,
        operator_id: str = SYSTEM_OPERATOR,
    ) -> LaborEntry:
        payload = LaborEntryInput.model_validate(data)
        entry_id = str(uuid4())
        created_at = dt.datetime.now()

        def build() -> LaborEntry:
            return LaborEntry(
                id=entry_id,
                project_id=project_id,
                trade_id=payload.trade_id,
                date=payload.date,
                trade=payload.trade.kind,
                trade_label=payload.trade.label,
                group=payload.trade.group,
                description=payload.description,
                phase=payload.phase,
                crew=list(payload.crew),
                total_hours=payload.total_hours,
                labor_rate=payload.labor_rate,
                total_cost=payload.total_cost,
                notes=payload.notes,
                created_at=created_at,
            )

        return self._add_entry(project_id, self.labor_store, build, operator_id)

    def add_material_entry(
        self,
        project_id: str,
        data: Union[MaterialEntryInput, Mapping[str, Any]],
        *,
        operator_id: str = SYSTEM_OPERATOR,
    ) -> MaterialEntry:
        payload = MaterialEntryInput.model_validate(data)
        entry_id = str(uuid4())
        created_at = dt.datetime.now()

        def build() -> MaterialEntry:
            return MaterialEntry(
                id=entry_id,
                project_id=project_id,
                trade_id=payload.trade_id,
                date=payload.date,
                material_name=payload.material_name,
                category=payload.category.kind,
                category_label=payload.category.label,
                group=payload.category.group,
                quantity=payload.quantity,
                unit=payload.unit.kind,
                unit_label=payload.unit.label,
                unit_cost=payload.unit_cost,
                total_cost=payload.total_cost,
                vendor=payload.vendor,
                invoice_number=payload.invoice_number,
                po_number=payload.po_number,
                notes=payload.notes,
                created_at=created_at,
            )

        return self._add_entry(project_id, self.material_store, build, operator_id)

    def add_subcontractor_entry(
        self,
        project_id: str,
        data: Union[SubcontractorEntryInput, Mapping[str, Any]],
        *,
        operator_id: str = SYSTEM_OPERATOR,
    ) -> SubcontractorEntry:
        payload = SubcontractorEntryInput.model_validate(data)
        entry_id = str(uuid4())
        created_at = dt.datetime.now()

        def build() -> SubcontractorEntry:
            return SubcontractorEntry(
                id=entry_id,
                project_id=project_id,
                trade_id=payload.trade_id,
                subcontractor_name=payload.subcontractor_name,
                company=payload.company or payload.subcontractor_name,
                email=payload.email,
                phone=payload.phone,
                trade=payload.trade.kind,
                trade_label=payload.trade.label,
                group=payload.trade.group,
                scope_of_work=payload.scope_of_work,
                contract_amount=payload.contract_amount,
                payments=[],
                total_paid=payload.total_paid,
                balance=payload.contract_amount - payload.total_paid,
                notes=payload.notes,
                created_at=created_at,
            )

        return self._add_entry(project_id, self.subcontractor_store, build, operator_id)

    # =========
    # Read entries (passthrough, unknown project -> [])
    # =========
    def get_project_labor_entries(self, project_id: str) -> List[LaborEntry]:
        return self.labor_store.list_by_project(project_id)

    def get_project_material_entries(self, project_id: str) -> List[MaterialEntry]:
        return self.material_store.list_by_project(project_id)

    def get_project_subcontractor_entries(self, project_id: str) -> List[SubcontractorEntry]:
        return self.subcontractor_store.list_by_project(project_id)

    # =========
    # Edit / delete entries
    # =========
    def update_labor_entry(self, entry_id: str, updates: Mapping[str, Any], *, operator_id: str = SYSTEM_OPERATOR) -> LaborEntry:
        return self._update_entry(self.labor_store, entry_id, updates, operator_id)

    def update_material_entry(self, entry_id: str, updates: Mapping[str, Any], *, operator_id: str = SYSTEM_OPERATOR) -> MaterialEntry:
        return self._update_entry(self.material_store, entry_id, updates, operator_id)

    def update_subcontractor_entry(self, entry_id: str, updates: Mapping[str, Any], *, operator_id: str = SYSTEM_OPERATOR) -> SubcontractorEntry:
        return self._update_entry(self.subcontractor_store, entry_id, updates, operator_id)

    def delete_labor_entry(self, entry_id: str, *, operator_id: str = SYSTEM_OPERATOR) -> None:
        self._delete_entry(self.labor_store, entry_id, operator_id)

    def delete_material_entry(self, entry_id: str, *, operator_id: str = SYSTEM_OPERATOR) -> None:
        self._delete_entry(self.material_store, entry_id, operator_id)

    def delete_subcontractor_entry(self, entry_id: str, *, operator_id: str = SYSTEM_OPERATOR) -> None:
        self._delete_entry(self.subcontractor_store, entry_id, operator_id)

    # =========
    # Internals
    # =========
    def _run_in_transaction(self, key: str, work: Callable[[], T]) -> T:
        '''
        执行 work 并提交；版本冲突 / 并发初始化冲突时整体回滚并重跑
        存储故障不重试，转成 StoreUnavailableError
        '''
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            self._pending_snapshot = None
            try:
                result = work()
                self.db.commit()
                if self._pending_snapshot is not None:
                    self.last_reconciled = self._pending_snapshot
                return result
            except (StaleDataError, _ActualsInitRace) as e:
                self.db.rollback()
                last_error = e
                logger.warning(
                    f"[reconcile] concurrent update on {key}, attempt {attempt}/{self.max_retries}: {e}"
                )
            except STORE_FAILURES as e:
                self.db.rollback()
                logger.error(f"[reconcile] store failure on {key}: {e}")
                raise StoreUnavailableError(str(e)) from e
            except Exception:
                self.db.rollback()
                raise

        logger.error(f"[reconcile] giving up on {key} after {self.max_retries} attempts")
        raise ConcurrentUpdateConflictError(key, self.max_retries) from last_error

    def _require_project(self, project_id: str) -> Project:
        project = self.project_store.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def _ensure_actuals(self, project: Project, operator_id: str) -> ProjectActuals:
        # flush 失败会让 project 过期，之后只用本地变量
        project_id = project.id
        actuals = self.project_store.get_actuals(project_id)
        if actuals is not None:
            return actuals

        actuals = ProjectActuals(
            id=str(uuid4()),
            project_id=project_id,
            labor_entries=[],
            material_entries=[],
            subcontractor_entries=[],
            total_labor_cost=ZERO,
            total_material_cost=ZERO,
            total_subcontractor_cost=ZERO,
            total_actual_cost=ZERO,
            variance=ZERO,
            variance_percentage=ZERO,
            daily_logs=[],
            change_orders=[],
            created_at=dt.datetime.now(),
        )
        try:
            self.project_store.create_actuals(actuals)
        except IntegrityError as e:
            raise _ActualsInitRace(f"actuals for project {project_id} created concurrently") from e

        self.audit_log_service.record_create(
            project_id=project_id,
            entity_type=AuditEntityType.ProjectActuals,
            entity_id=actuals.id,
            operator_id=operator_id,
        )
        logger.info(f"[actuals] initialized project={project_id} actuals={actuals.id}")
        return actuals

    def _reconcile(self, project: Project) -> ProjectActuals:
        '''
        read-all / compute / write-all
        actuals 必须在读取条目之前加载：写回时按这个版本号做条件更新，
        读取之后任何已提交的重算都会让本次写回失败并重跑
        '''
        actuals = self.project_store.get_actuals(project.id)
        if actuals is None:
            raise ActualsNotFoundError(project.id)

        labor = self.labor_store.list_by_project(project.id)
        material = self.material_store.list_by_project(project.id)
        subcontractor = self.subcontractor_store.list_by_project(project.id)

        totals = compute_totals(labor, material, subcontractor)
        variance = compute_variance(totals.total_actual_cost, project.estimated_cost)

        before_total = actuals.total_actual_cost
        now = dt.datetime.now()

        # 缓存列表整体替换，不在原列表上修改
        actuals.labor_entries = [entry_to_dto(e).model_dump(mode="json") for e in labor]
        actuals.material_entries = [entry_to_dto(e).model_dump(mode="json") for e in material]
        actuals.subcontractor_entries = [entry_to_dto(e).model_dump(mode="json") for e in subcontractor]
        actuals.total_labor_cost = totals.total_labor_cost
        actuals.total_material_cost = totals.total_material_cost
        actuals.total_subcontractor_cost = totals.total_subcontractor_cost
        actuals.total_actual_cost = totals.total_actual_cost
        actuals.variance = variance.variance
        actuals.variance_percentage = variance.variance_percentage
        actuals.reconciled_at = now  # 保证每次都发出带版本检查的 UPDATE

        self.project_store.update(project.id, {"updated_at": now})

        if Decimal(before_total or 0) != totals.total_actual_cost:
            self.audit_log_service.record_system_update(
                project_id=project.id,
                entity_type=AuditEntityType.ProjectActuals,
                entity_id=actuals.id,
                changed_attribute="total_actual_cost",
                before_value=before_total,
                after_value=totals.total_actual_cost,
            )

        self.db.flush()
        self._pending_snapshot = ProjectActualsDTO.from_domain_model(actuals)
        logger.info(
            f"[actuals] reconciled project={project.id} "
            f"labor={len(labor)} material={len(material)} subcontractor={len(subcontractor)} "
            f"total={totals.total_actual_cost} variance={variance.variance}"
        )
        return actuals

    def _add_entry(self, project_id: str, store: EntryStore, build: Callable[[], Any], operator_id: str):
        def work():
            project = self._require_project(project_id)
            self._ensure_actuals(project, operator_id)
            entry = store.create(build())
            self.audit_log_service.record_create(
                project_id=project_id,
                entity_type=AUDIT_TYPE_BY_MODEL[store.model],
                entity_id=entry.id,
                operator_id=operator_id,
            )
            self._reconcile(project)
            return entry

        return self._run_in_transaction(project_id, work)

    def _load_entry(self, store: EntryStore, entry_id: str):
        entry = store.get_by_id(entry_id)
        if entry is None:
            raise EntryNotFoundError(store.kind, entry_id)
        return entry

    def _update_entry(self, store: EntryStore, entry_id: str, updates: Mapping[str, Any], operator_id: str):
        normalized = {to_snake(field): value for field, value in updates.items()}
        allowed = EDITABLE_FIELDS[store.model]
        for field in normalized:
            if field not in allowed:
                raise ValueError(f"Field '{field}' is not editable")

        def work():
            entry = self._load_entry(store, entry_id)
            project = self._require_project(entry.project_id)
            self._ensure_actuals(project, operator_id)
            self._apply_updates(entry, normalized, operator_id)
            self.db.flush()
            self._reconcile(project)
            return entry

        return self._run_in_transaction(entry_id, work)

    def _delete_entry(self, store: EntryStore, entry_id: str, operator_id: str) -> None:
        def work():
            entry = self._load_entry(store, entry_id)
            project = self._require_project(entry.project_id)
            self._ensure_actuals(project, operator_id)
            snapshot = entry_to_dto(entry).model_dump(mode="json")
            store.delete(entry)
            self.audit_log_service.record_delete(
                project_id=project.id,
                entity_type=AUDIT_TYPE_BY_MODEL[store.model],
                entity_id=entry_id,
                before_value=snapshot,
                operator_id=operator_id,
            )
            self._reconcile(project)

        self._run_in_transaction(entry_id, work)
        logger.info(f"[actuals] deleted {store.kind} entry={entry_id}")

    def _apply_updates(self, entry, updates: Dict[str, Any], operator_id: str) -> None:
        '''
        逐字段比较并赋值，变化的字段各记一条审计
        trade / category / unit 走带标签枚举转换；group 跟随类别一起更新
        '''
        entity_type = AUDIT_TYPE_BY_MODEL[type(entry)]
        changed = set()

        for field, raw_value in updates.items():
            for attr, new_value in self._column_values(entry, field, raw_value).items():
                old_value = getattr(entry, attr)
                if old_value == new_value:
                    continue
                setattr(entry, attr, new_value)
                changed.add(field)
                self.audit_log_service.record_update(
                    project_id=entry.project_id,
                    entity_type=entity_type,
                    entity_id=entry.id,
                    changed_attribute=attr,
                    before_value=old_value,
                    after_value=new_value,
                    operator_id=operator_id,
                )

        # balance 只在合同金额 / 已付金额被改写时重算，与 payments 无关
        if isinstance(entry, SubcontractorEntry) and changed & {"contract_amount", "total_paid"}:
            old_balance = entry.balance
            entry.balance = Decimal(entry.contract_amount) - Decimal(entry.total_paid)
            self.audit_log_service.record_system_update(
                project_id=entry.project_id,
                entity_type=entity_type,
                entity_id=entry.id,
                changed_attribute="balance",
                before_value=old_balance,
                after_value=entry.balance,
            )

    def _column_values(self, entry, field: str, value: Any) -> Dict[str, Any]:
        if field in ("trade", "category"):
            tag = TradeTag.parse(value)
            return {field: tag.kind, f"{field}_label": tag.label, "group": tag.group}
        if field == "unit":
            tag = UnitTag.parse(value)
            return {"unit": tag.kind, "unit_label": tag.label}
        if field in DECIMAL_FIELDS:
            return {field: Decimal(str(value))}
        if field == "date" and isinstance(value, str):
            return {field: dt.date.fromisoformat(value)}
        return {field: value}
