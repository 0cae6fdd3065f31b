"""分发结果类型.

保存/扩展动作显式返回 ``Success`` 或 ``Failure``,由分发器穷举处理,
不再依赖真假值判断.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeAlias, TypeVar

from crudcore.constants import HttpStatus

PayloadT = TypeVar("PayloadT")


@dataclass(frozen=True, slots=True)
class Success(Generic[PayloadT]):
    """成功结果.

    Attributes:
        payload: 原样回传给客户端的 JSON 数据.
        status: HTTP 状态码,默认为 200.

    """

    payload: PayloadT
    status: int = HttpStatus.OK


@dataclass(frozen=True, slots=True)
class Failure:
    """失败结果,携带需要展示给用户的错误消息."""

    messages: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, *messages: str) -> Failure:
        """以可变参数构造失败结果."""
        return cls(messages=tuple(messages))


DispatchResult: TypeAlias = Success[object] | Failure
