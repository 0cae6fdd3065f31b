"""通用结构化数据类型别名.

统一 JSON/Mapping 风格的类型,方便在分发器、构建器等模块中共享定义,避免重复声明.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from typing import TypeAlias

ScalarValue: TypeAlias = str | int | float | bool | None
PayloadValue: TypeAlias = ScalarValue | Sequence["PayloadValue"] | Mapping[str, "PayloadValue"]
MutablePayloadDict: TypeAlias = dict[str, PayloadValue]
JsonValue: TypeAlias = ScalarValue | Sequence["JsonValue"] | Mapping[str, "JsonValue"]
StructlogEventDict: TypeAlias = MutableMapping[str, object]
LoggerExtra: TypeAlias = Mapping[str, JsonValue]
