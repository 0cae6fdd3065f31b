"""HTTP方法常量.

定义分发器关心的HTTP请求方法,避免魔法字符串.
"""

from typing import ClassVar


class HttpMethod:
    """HTTP方法常量."""

    GET: ClassVar[str] = "GET"           # 渲染默认视图
    POST: ClassVar[str] = "POST"         # 表单提交或 AJAX 动作
