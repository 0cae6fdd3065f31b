"""插入数组构建.

请求原始字段与持久化层之间唯一的清洗边界: 只保留表配置中声明过的字段(白名单),
跳过空值与主键字段.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from crudcore.handlers.config import TableConfig
from crudcore.types import MutablePayloadDict


def _is_blank(value: object) -> bool:
    # 空字段交给数据库默认值或 NULL 处理
    return value is None or value == ""


def build_insert_array(
    table_config: TableConfig | Mapping[str, Any],
    table_key: str,
    post_data: Mapping[str, Any],
) -> MutablePayloadDict:
    """根据表配置生成可直接写库的字段映射.

    Args:
        table_config: 表配置,也接受尚未校验的原始映射.
        table_key: 表配置中的逻辑表键.
        post_data: 请求提交的数据.

    Returns:
        字段名到值的映射;表键未知时返回空字典.输出永远不包含主键字段.

    """
    config = TableConfig.from_mapping(table_config)
    definition = config.get(table_key)
    if definition is None:
        return {}

    insert: MutablePayloadDict = {}
    for name in definition.insertable_fields():
        if name not in post_data:
            continue
        value = post_data[name]
        if _is_blank(value):
            continue
        insert[name] = value
    return insert
