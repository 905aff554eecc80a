# actuals_app/schemas/tags.py
'''
类别 / 单位的“带标签枚举”
已知取值落到枚举成员；未知字符串落到 custom，并把原文保存在 label 里
'''
from typing import Optional, Union

from pydantic import BaseModel, model_validator

from actuals_app.db.enums import TradeCategory, UnitType, CategoryGroup, category_group


def _coerce(enum_cls, value) -> tuple:
    '''
    把 枚举成员 / 枚举值字符串 / 枚举名字符串 / 任意字符串 转成 (member, label)
    '''
    if isinstance(value, enum_cls):
        return value, None
    text = str(value).strip()
    for member in enum_cls:
        if member is enum_cls.custom:
            continue
        if text.lower() in (member.value, member.name):
            return member, None
    return enum_cls.custom, text


class TradeTag(BaseModel):
    kind: TradeCategory
    label: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_plain_values(cls, data):
        if isinstance(data, (dict, cls)):
            return data
        if data is None or (isinstance(data, str) and not data.strip()):
            return {"kind": TradeCategory.other}
        kind, label = _coerce(TradeCategory, data)
        return {"kind": kind, "label": label}

    @model_validator(mode="after")
    def blank_custom_falls_back_to_other(self):
        # 没有文字的 custom 没法展示，按 other 处理
        if self.kind is TradeCategory.custom and not (self.label or "").strip():
            self.kind = TradeCategory.other
        if self.kind is not TradeCategory.custom:
            self.label = None
        return self

    @property
    def group(self) -> CategoryGroup:
        return category_group(self.kind)

    @property
    def display(self) -> str:
        return self.label if self.kind is TradeCategory.custom else self.kind.value

    @classmethod
    def parse(cls, value: Union["TradeTag", TradeCategory, str]) -> "TradeTag":
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)


class UnitTag(BaseModel):
    kind: UnitType = UnitType.each
    label: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_plain_values(cls, data):
        if isinstance(data, (dict, cls)):
            return data
        if data is None or (isinstance(data, str) and not data.strip()):
            return {"kind": UnitType.each}
        kind, label = _coerce(UnitType, data)
        return {"kind": kind, "label": label}

    @model_validator(mode="after")
    def custom_requires_label(self):
        if self.kind is UnitType.custom and not self.label:
            raise ValueError("custom unit requires a label")
        if self.kind is not UnitType.custom:
            self.label = None
        return self

    @property
    def display(self) -> str:
        return self.label if self.kind is UnitType.custom else self.kind.value

    @classmethod
    def parse(cls, value: Union["UnitTag", UnitType, str, None]) -> "UnitTag":
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)
