"""请求分发相关常量.

包括 POST 判别字段取值、查询条件类型、请求作用域属性名与模板上下文键名.
"""

from __future__ import annotations

from enum import Enum

# POST 请求中的判别字段名
DISPATCH_FIELD = "config"


class DispatchAction(str, Enum):
    """POST 请求中 ``config`` 判别字段的内置取值."""

    SUBMIT = "submit"
    DELETE = "delete"


class ConditionType(str, Enum):
    """查询条件描述符类型."""

    SIMPLE = "simple"
    CONDITIONAL_FALLBACK = "conditionalFallback"


class RequestAttribute:
    """上游中间件挂载到 ``flask.g`` 上的属性名."""

    ADMIN_NAME = "admin_name"
    USER_PATH = "user_path"
    FORM_DATA = "form_data"
    CSRF_TOKEN = "csrf_token"
    ADMIN_CONTEXT = "admin_context"
    LANGUAGE_CONTEXT = "language_context"


class TemplateAttribute:
    """渲染模板时注入的上下文键名."""

    ADMIN_NAME = "adminName"
    USER_PATH = "userPath"
    USER = "user"
    USER_SETTINGS = "userSettings"
    LANGUAGE = "language"
    CSRF_TOKEN = "csrfToken"
    QUERY_LOG = "queryLog"
