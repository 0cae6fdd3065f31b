"""请求 payload 解析与规范化.

目标:
- 统一处理 JSON dict 与 Werkzeug MultiDict(form/query).
- 提供最小的输入规范化(字符串 NUL 清理),并允许对敏感字段保留 raw 值.
- ``name[]`` 形式的表单字段固定为 list,其余 MultiDict 字段取最后一个值.

注意:
- 本模块只负责 "取参形状" 与 "基础规范化",不做业务校验.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, cast

from crudcore.types import MutablePayloadDict, PayloadValue, ScalarValue

_STRING_LIKE_TYPES = (str, bytes, bytearray)
_LIST_SUFFIX = "[]"


def parse_payload(
    payload: object | None,
    *,
    list_fields: Sequence[str] = (),
    preserve_raw_fields: Sequence[str] = (),
) -> MutablePayloadDict:
    """解析并规范化 payload.

    Args:
        payload: JSON dict 或 MultiDict 兼容对象.
        list_fields: 需要固定为 list 形状的字段名集合(单值也输出 list).
        preserve_raw_fields: 需要保留 raw 字符串的字段名集合(例如 password 字段).

    Returns:
        规范化后的 payload dict.

    Raises:
        TypeError: payload 既不是 mapping 也不是 MultiDict.

    """
    if payload is None:
        return {}

    list_field_set = set(list_fields)
    raw_field_set = set(preserve_raw_fields)

    if hasattr(payload, "getlist"):
        return _parse_multidict(payload, list_fields=list_field_set, preserve_raw_fields=raw_field_set)
    if isinstance(payload, Mapping):
        return {
            str(key): _sanitize_value(value, field_name=str(key), preserve_raw_fields=raw_field_set)
            for key, value in payload.items()
        }
    raise TypeError("payload 必须为 mapping 或 MultiDict 兼容对象")


def _parse_multidict(
    payload: object,
    *,
    list_fields: set[str],
    preserve_raw_fields: set[str],
) -> MutablePayloadDict:
    multi_dict = cast(Any, payload)
    sanitized: MutablePayloadDict = {}
    for key in list(multi_dict.keys()):
        values = list(multi_dict.getlist(key) or [])
        name = key[: -len(_LIST_SUFFIX)] if key.endswith(_LIST_SUFFIX) else key
        cleaned = [
            _sanitize_scalar_value(value, field_name=name, preserve_raw_fields=preserve_raw_fields) for value in values
        ]
        if key.endswith(_LIST_SUFFIX) or name in list_fields:
            sanitized[name] = cleaned
        else:
            sanitized[name] = cleaned[-1] if cleaned else None
    return sanitized


def _sanitize_value(value: object, *, field_name: str, preserve_raw_fields: set[str]) -> PayloadValue:
    if isinstance(value, Mapping):
        return {
            str(key): _sanitize_value(item, field_name=field_name, preserve_raw_fields=preserve_raw_fields)
            for key, item in value.items()
        }
    if isinstance(value, Sequence) and not isinstance(value, _STRING_LIKE_TYPES):
        return [_sanitize_value(item, field_name=field_name, preserve_raw_fields=preserve_raw_fields) for item in value]
    return _sanitize_scalar_value(value, field_name=field_name, preserve_raw_fields=preserve_raw_fields)


def _sanitize_scalar_value(value: object, *, field_name: str, preserve_raw_fields: set[str]) -> ScalarValue:
    if value is None:
        return None
    preserve_raw = field_name in preserve_raw_fields or "password" in field_name.lower()
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (bytes, bytearray)):
        decoded = value.decode(errors="ignore")
        return decoded if preserve_raw else _strip_nul(decoded)
    text = value if isinstance(value, str) else str(value)
    return text if preserve_raw else _strip_nul(text)


def _strip_nul(value: str) -> str:
    return value.replace("\x00", "").strip()
