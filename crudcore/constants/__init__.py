"""常量模块。

集中管理请求分发、错误分类与 HTTP 相关常量。

主要常量：
- HttpStatus: HTTP 状态码常量
- HttpMethod: HTTP 方法常量
- DispatchAction: POST 请求 config 判别字段取值
- ConditionType: 查询条件描述符类型
- ErrorMessages: 错误消息常量
"""

# 导入HTTP状态码常量（使用Python标准库）
from http import HTTPStatus as HttpStatus

# 导入分发相关常量
from .dispatch import DISPATCH_FIELD, ConditionType, DispatchAction, RequestAttribute, TemplateAttribute

# 导入HTTP方法常量
from .http_methods import HttpMethod

# 导入所有系统常量
from .system_constants import ErrorCategory, ErrorMessages, ErrorSeverity, LogLevel

__all__ = [
    "DISPATCH_FIELD",
    "ConditionType",
    "DispatchAction",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "HttpMethod",
    "HttpStatus",
    "LogLevel",
    "RequestAttribute",
    "TemplateAttribute",
]
