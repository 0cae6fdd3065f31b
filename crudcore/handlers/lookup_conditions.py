"""查询条件构建.

把处理器配置中的条件描述符与请求里的搜索关键字组合成具体条件,交给下游查询层.
没有搜索关键字时不产生任何条件.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from crudcore.handlers.config import ConditionalFallbackCondition, HandlerConfig, SimpleCondition


def resolve_queue(handler_config: HandlerConfig, post_data: Mapping[str, Any]) -> Any:
    """返回当前搜索关键字,未配置或为空时返回 None."""
    if handler_config.searchqueue is None:
        return None
    queue = post_data.get(handler_config.searchqueue)
    if queue is None or queue == "":
        return None
    return queue


def _dump(condition: SimpleCondition | ConditionalFallbackCondition) -> dict[str, Any]:
    return copy.deepcopy(condition.model_dump(by_alias=True))


def build_lookup_conditions(
    handler_config: HandlerConfig | Mapping[str, Any],
    post_data: Mapping[str, Any],
) -> dict[str, dict[str, Any]]:
    """生成查询条件.

    Args:
        handler_config: 处理器配置,也接受尚未校验的原始映射.
        post_data: 请求提交的数据.

    Returns:
        条件名到条件描述的映射.conditionalFallback 条件的 ``then``/``else`` 分支注入关键字,
        ``if`` 分支保留配置值(缺省为 None);普通条件直接注入 ``queue``.

    """
    config = HandlerConfig.from_mapping(handler_config)
    queue = resolve_queue(config, post_data)
    if queue is None:
        return {}

    conditions: dict[str, dict[str, Any]] = {}
    for name, descriptor in config.lookup.conditions.items():
        data = _dump(descriptor)
        if isinstance(descriptor, ConditionalFallbackCondition):
            data["if"].setdefault("queue", None)
            data["then"]["queue"] = queue
            data["else"]["queue"] = queue
        else:
            data["queue"] = queue
        conditions[name] = data
    return conditions


def ensure_search_queue(handler_config: HandlerConfig, post_data: dict[str, Any]) -> dict[str, Any]:
    """保证已配置的搜索字段存在于 post_data 中(缺省为空串),原地修改并返回."""
    if handler_config.searchqueue is not None and handler_config.searchqueue not in post_data:
        post_data[handler_config.searchqueue] = ""
    return post_data
