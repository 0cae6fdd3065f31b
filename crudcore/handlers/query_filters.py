"""把查询条件应用到 SQLAlchemy 查询.

供使用内置数据库连接(Flask-SQLAlchemy)的实体处理器复用.约定的描述符键:

- ``field``: 模型上的列名.
- ``operator``: ``like``(默认,包含匹配)、``startswith``、``equals``.
- ``queue``: 查询值,由条件构建器注入.

conditionalFallback 条件中,``if`` 分支的 ``queue`` 为 None 时表示判断该列非空,
否则表示该列等于给定值;命中时使用 ``then`` 分支,否则使用 ``else`` 分支.
多个条件之间为 OR 关系.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from sqlalchemy import and_, not_, or_
from sqlalchemy.sql.elements import ColumnElement

from crudcore.constants import ConditionType
from crudcore.utils.structlog_config import get_logger

QueryT = TypeVar("QueryT")

_DEFAULT_OPERATOR = "like"

logger = get_logger("handlers")


def _column(model: type[Any], field_name: object) -> Any | None:
    if not isinstance(field_name, str) or not field_name:
        return None
    column = getattr(model, field_name, None)
    if column is None or not hasattr(column, "ilike"):
        logger.warning("查询条件引用了不存在的列", module="handlers", model=model.__name__, field=field_name)
        return None
    return column


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _simple_expression(model: type[Any], descriptor: Mapping[str, Any]) -> ColumnElement[bool] | None:
    column = _column(model, descriptor.get("field"))
    if column is None:
        return None

    queue = descriptor.get("queue")
    operator = descriptor.get("operator", _DEFAULT_OPERATOR)
    if operator == "equals":
        return column == queue
    if operator == "startswith":
        return column.ilike(f"{_escape_like(str(queue))}%", escape="\\")
    return column.ilike(f"%{_escape_like(str(queue))}%", escape="\\")


def _presence_expression(model: type[Any], descriptor: Mapping[str, Any]) -> ColumnElement[bool] | None:
    column = _column(model, descriptor.get("field"))
    if column is None:
        return None
    queue = descriptor.get("queue")
    if queue is None:
        return column.is_not(None)
    return column == queue


def condition_expression(model: type[Any], descriptor: Mapping[str, Any]) -> ColumnElement[bool] | None:
    """把单个条件描述转换为 SQLAlchemy 表达式,无法转换时返回 None."""
    if descriptor.get("type") != ConditionType.CONDITIONAL_FALLBACK.value:
        return _simple_expression(model, descriptor)

    predicate = _presence_expression(model, descriptor.get("if") or {})
    then_expr = _simple_expression(model, descriptor.get("then") or {})
    else_expr = _simple_expression(model, descriptor.get("else") or {})
    if predicate is None or then_expr is None or else_expr is None:
        return None
    return or_(and_(predicate, then_expr), and_(not_(predicate), else_expr))


def apply_lookup_conditions(query: QueryT, model: type[Any], conditions: Mapping[str, Mapping[str, Any]]) -> QueryT:
    """把条件以 OR 组合后追加到查询上;没有可用条件时原样返回."""
    expressions = [
        expression
        for expression in (condition_expression(model, descriptor) for descriptor in conditions.values())
        if expression is not None
    ]
    if not expressions:
        return query
    return query.filter(or_(*expressions))  # type: ignore[attr-defined]
