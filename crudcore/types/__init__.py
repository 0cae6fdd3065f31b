"""crudcore 共享类型别名与结果类型."""

from crudcore.types.results import DispatchResult, Failure, Success
from crudcore.types.structures import (
    JsonValue,
    LoggerExtra,
    MutablePayloadDict,
    PayloadValue,
    ScalarValue,
    StructlogEventDict,
)

__all__ = [
    "DispatchResult",
    "Failure",
    "JsonValue",
    "LoggerExtra",
    "MutablePayloadDict",
    "PayloadValue",
    "ScalarValue",
    "StructlogEventDict",
    "Success",
]
