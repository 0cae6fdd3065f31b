"""点路径键到本地化文本的查询.

- ``LanguageContext`` 是不可变的语言快照,可在单个请求内安全传递.
- ``Translator`` 保存进程级的当前语言,切换时整体替换快照.

查询永远不会抛出异常: 缺失的键返回 None,模板中渲染为空.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar

_SCALAR_TYPES = (str, int, float, bool)
_STRING_LIKE_TYPES = (str, bytes, bytearray)
_KEY_SEPARATOR = "."


def _freeze(value: object) -> object:
    """递归转换为只读结构(dict -> MappingProxyType, list -> tuple)."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(key): _freeze(item) for key, item in value.items()})
    if isinstance(value, Sequence) and not isinstance(value, _STRING_LIKE_TYPES):
        return tuple(_freeze(item) for item in value)
    return value


def _is_container(value: object) -> bool:
    return isinstance(value, Mapping) or (
        isinstance(value, Sequence) and not isinstance(value, _STRING_LIKE_TYPES)
    )


def _step(current: object, part: str) -> tuple[bool, object]:
    """在当前层级中查找一段路径,返回 (是否命中, 值)."""
    if isinstance(current, Mapping):
        if part not in current:
            return False, None
        return True, current[part]
    if isinstance(current, Sequence) and not isinstance(current, _STRING_LIKE_TYPES):
        # 只接受 ASCII 数字下标
        if not (part.isascii() and part.isdigit()) or int(part) >= len(current):
            return False, None
        return True, current[int(part)]
    return False, None


def _stringify(value: object) -> str:
    """按语言文件的既有约定转为字符串: True 为 "1", False 为空串, 整数值浮点数不带小数部分."""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True, slots=True)
class LanguageContext:
    """单个语言的只读字典快照.

    Attributes:
        code: 语言名称(如 ``english``),未知时为 None.
        dictionary: 嵌套的只读字典.

    """

    code: str | None = None
    dictionary: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, dictionary: Mapping[str, object] | None, code: str | None = None) -> LanguageContext:
        """以任意嵌套字典构造快照,内部会复制并冻结."""
        frozen = _freeze(dictionary or {})
        return cls(code=code, dictionary=frozen)  # type: ignore[arg-type]

    def lookup(self, key: str | None) -> object | None:
        """沿点路径查找原始值,任一段缺失或提前遇到标量时返回 None."""
        if not key:
            return None

        parts = key.split(_KEY_SEPARATOR)
        last_index = len(parts) - 1
        current: object = self.dictionary
        for index, part in enumerate(parts):
            found, current = _step(current, part)
            if not found:
                return None
            if index < last_index and not _is_container(current):
                return None
        return current

    def translate(self, key: str | None) -> str | None:
        """翻译点路径键,例如 ``"users.form.title"``.

        Args:
            key: 点分隔的键,None 或空串直接返回 None.

        Returns:
            叶子为标量时返回其字符串形式,否则返回 None.

        """
        value = self.lookup(key)
        if isinstance(value, _SCALAR_TYPES):
            return _stringify(value)
        return None


class Translator:
    """进程级当前语言.

    ``set_language`` 在锁内整体替换快照;读取方拿到的始终是完整的旧快照或新快照.
    """

    _active: ClassVar[LanguageContext | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def set_language(cls, dictionary: Mapping[str, object] | LanguageContext, code: str | None = None) -> LanguageContext:
        """替换当前语言字典.

        Args:
            dictionary: 新的嵌套字典或已构造的语言快照.
            code: 语言名称,用于判断是否需要重新加载.

        Returns:
            新的语言快照.

        """
        if isinstance(dictionary, LanguageContext):
            context = dictionary
        else:
            context = LanguageContext.from_mapping(dictionary, code)
        with cls._lock:
            cls._active = context
        return context

    @classmethod
    def is_loaded(cls) -> bool:
        """是否已加载过任何语言."""
        return cls._active is not None

    @classmethod
    def active(cls) -> LanguageContext:
        """返回当前语言快照,未加载时返回空快照."""
        context = cls._active
        return context if context is not None else LanguageContext()

    @classmethod
    def active_code(cls) -> str | None:
        """返回当前语言名称."""
        return cls.active().code

    @classmethod
    def translate(cls, key: str | None) -> str | None:
        """使用当前语言翻译点路径键."""
        return cls.active().translate(key)

    @classmethod
    def reset(cls) -> None:
        """清空当前语言,下一次渲染会重新加载."""
        with cls._lock:
            cls._active = None


def translate(key: str | None, context: LanguageContext | None = None) -> str | None:
    """翻译便捷函数,优先使用传入的语言快照."""
    if context is not None:
        return context.translate(key)
    return Translator.translate(key)
