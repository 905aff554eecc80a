from typing import Any, Optional, Union
from uuid import uuid4
from datetime import datetime, date
from decimal import Decimal
import enum

from sqlalchemy.orm import Session

from actuals_app.models.audit_log import AuditLog
from actuals_app.db.enums import AuditEntityType, AuditAction

SYSTEM_OPERATOR = "SYSTEM"


class AuditLogService:
    """
    Centralized service for recording all auditable actions.
    This service is the ONLY place where AuditLog records can be created.
    Rows are added to the caller's transaction and never committed here.
    """

    def __init__(self, db: Session):
        self.db = db

    def serialize_audit_value(self, value) -> Any:
        if value is None:
            return None
        if isinstance(value, Decimal):
            return str(value)      # 金额按字符串保存，避免浮点误差
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, enum.Enum):
            return value.value
        if isinstance(value, (int, float, str, bool, list, dict)):
            return value
        return str(value)  # 兜底

    def _normalize_entity_type(self, entity_type: Union[str, AuditEntityType]) -> AuditEntityType:
        """
        支持：
        - 枚举值：AuditEntityType.LaborEntry
        - 枚举值字符串："labor_entry"
        - 枚举名 / 类名："LaborEntry"
        """
        if isinstance(entity_type, AuditEntityType):
            return entity_type

        entity_type_str = str(entity_type).strip()
        for enum_member in AuditEntityType:
            if entity_type_str.lower() in (enum_member.value, enum_member.name.lower()):
                return enum_member

        raise ValueError(f"Unknown entity_type: {entity_type_str}. Valid values: {[e.value for e in AuditEntityType]}")

    def _record(
        self,
        *,
        project_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        action: AuditAction,
        changed_attribute: str,
        before_value: Any,
        after_value: Any,
        operator_id: str,
    ) -> AuditLog:
        log = AuditLog(
            id=str(uuid4()),
            project_id=project_id,
            entity_type=self._normalize_entity_type(entity_type),
            entity_id=entity_id,
            action=action,
            changed_attribute=changed_attribute,
            before_value=self.serialize_audit_value(before_value),
            after_value=self.serialize_audit_value(after_value),
            operator_id=operator_id,
            timestamp=datetime.now(),
        )
        self.db.add(log)
        return log

    def record_create(
        self,
        *,
        project_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        operator_id: str,
    ) -> AuditLog:
        '''
        创建操作的审计日志：新增条目、初始化 ProjectActuals

        :param project_id: 从属项目ID
        :param entity_type: 实体类型：字符串或 AuditEntityType 枚举
        :param entity_id: 实体唯一id
        :param operator_id: 操作用户ID
        '''
        return self._record(
            project_id=project_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.create,
            changed_attribute="__all__",
            before_value=None,
            after_value=None,
            operator_id=operator_id,
        )

    def record_update(
        self,
        *,
        project_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        changed_attribute: str,
        before_value: Any,
        after_value: Any,
        operator_id: str,
    ) -> AuditLog:
        '''
        人工修改某个字段的审计日志（一个字段一条）
        '''
        return self._record(
            project_id=project_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.update,
            changed_attribute=changed_attribute,
            before_value=before_value,
            after_value=after_value,
            operator_id=operator_id,
        )

    def record_delete(
        self,
        *,
        project_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        before_value: Any,
        operator_id: str,
    ) -> AuditLog:
        '''
        删除操作的审计日志，before_value 保存被删条目的快照
        '''
        return self._record(
            project_id=project_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.delete,
            changed_attribute="__all__",
            before_value=before_value,
            after_value=None,
            operator_id=operator_id,
        )

    def record_system_update(
        self,
        *,
        project_id: Optional[str],
        entity_type: Union[str, AuditEntityType],
        entity_id: str,
        changed_attribute: str,
        before_value: Any,
        after_value: Any,
    ) -> AuditLog:
        '''
        系统自动更新的审计日志，应用场景：
        ActualsService 重算后 total_actual_cost 变化
        ActualsService 根据合同金额/已付金额重写 balance
        '''
        return self._record(
            project_id=project_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=AuditAction.system,
            changed_attribute=changed_attribute,
            before_value=before_value,
            after_value=after_value,
            operator_id=SYSTEM_OPERATOR,
        )
