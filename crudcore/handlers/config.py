"""处理器声明式配置.

- ``TableConfig``: 逻辑表键 -> 字段定义映射,保留键 ``identifier`` 指向主键字段.
- ``HandlerConfig``: 搜索字段名与查询条件描述符.

两者都在处理器实例化时校验一次,之后只读;配置不合法时抛出 ``ConfigurationError``,
不会拖到请求处理阶段才暴露.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from crudcore.constants import ConditionType
from crudcore.errors import ConfigurationError

IDENTIFIER_KEY = "identifier"


def _format_validation_error(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


class TableDefinition(BaseModel):
    """单张表的字段定义.

    Attributes:
        field_names: 允许写入的请求字段名(按声明顺序,包含主键字段).
        identifier: 主键字段名,未声明时为 None.

    """

    model_config = ConfigDict(frozen=True)

    field_names: tuple[str, ...] = ()
    identifier: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_field_map(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            raise TypeError("字段定义必须为映射")
        if isinstance(data.get("field_names"), (list, tuple)):
            return data
        for label, name in data.items():
            if not isinstance(name, str) or not name:
                raise ValueError(f"字段 {label} 必须映射到非空字符串")
        identifier = data.get(IDENTIFIER_KEY)
        return {"field_names": tuple(data.values()), "identifier": identifier}

    def insertable_fields(self) -> tuple[str, ...]:
        """返回可进入插入数组的字段名(排除主键)."""
        return tuple(name for name in self.field_names if name != self.identifier)


class TableConfig(BaseModel):
    """逻辑表键到字段定义的映射."""

    model_config = ConfigDict(frozen=True)

    tables: dict[str, TableDefinition] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | TableConfig | None) -> TableConfig:
        """从原始映射构造并校验表配置.

        Raises:
            ConfigurationError: 字段定义不合法.

        """
        if isinstance(raw, TableConfig):
            return raw
        try:
            return cls(tables=dict(raw or {}))
        except PydanticValidationError as exc:
            raise ConfigurationError(f"表配置无效: {_format_validation_error(exc)}") from exc

    def get(self, table_key: str) -> TableDefinition | None:
        """按逻辑表键获取定义,未知键返回 None."""
        return self.tables.get(table_key)

    def __contains__(self, table_key: object) -> bool:
        return table_key in self.tables


class SimpleCondition(BaseModel):
    """普通查询条件,查询时注入 ``queue``.

    其余键(字段名、比较方式等)原样保留,交由下游查询层解释.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    queue: Any = None


class ConditionalFallbackCondition(BaseModel):
    """带 if/then/else 分支的条件.

    ``then`` 与 ``else`` 分支总是注入查询值;``if`` 分支只判断存在与否,
    未配置 ``queue`` 时保持 None.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    type: Literal["conditionalFallback"] = ConditionType.CONDITIONAL_FALLBACK.value
    if_: SimpleCondition = Field(alias="if")
    then: SimpleCondition
    else_: SimpleCondition = Field(alias="else")


def _condition_tag(value: Any) -> str:
    raw_type = value.get("type") if isinstance(value, Mapping) else getattr(value, "type", None)
    if raw_type == ConditionType.CONDITIONAL_FALLBACK.value:
        return ConditionType.CONDITIONAL_FALLBACK.value
    return ConditionType.SIMPLE.value


ConditionDescriptor = Annotated[
    Union[
        Annotated[SimpleCondition, Tag(ConditionType.SIMPLE.value)],
        Annotated[ConditionalFallbackCondition, Tag(ConditionType.CONDITIONAL_FALLBACK.value)],
    ],
    Discriminator(_condition_tag),
]


class LookupConfig(BaseModel):
    """查询配置."""

    model_config = ConfigDict(extra="allow", frozen=True)

    conditions: dict[str, ConditionDescriptor] = Field(default_factory=dict)


class HandlerConfig(BaseModel):
    """单个处理器的配置.

    Attributes:
        searchqueue: 承载搜索关键字的请求字段名,可选.
        lookup: 查询条件配置.

    """

    model_config = ConfigDict(extra="allow", frozen=True)

    searchqueue: str | None = None
    lookup: LookupConfig = Field(default_factory=LookupConfig)

    @field_validator("searchqueue")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | HandlerConfig | None) -> HandlerConfig:
        """从原始映射构造并校验处理器配置.

        Raises:
            ConfigurationError: 条件描述符不合法(例如 conditionalFallback 缺少分支).

        """
        if isinstance(raw, HandlerConfig):
            return raw
        try:
            return cls.model_validate(dict(raw or {}))
        except PydanticValidationError as exc:
            raise ConfigurationError(f"处理器配置无效: {_format_validation_error(exc)}") from exc

    @property
    def is_empty(self) -> bool:
        """是否没有任何有效配置."""
        return self.searchqueue is None and not self.lookup.conditions and not self.model_extra
