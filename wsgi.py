"""crudcore - WSGI 入口文件, 提供生产与本地统一启动方式。."""

from __future__ import annotations

import os
from typing import Final

from crudcore import create_app

DEFAULT_HOST: Final[str] = "127.0.0.1"
DEFAULT_PORT: Final[str] = "5001"

application = app = create_app()


def _resolve_host_and_port() -> tuple[str, int]:
    """解析 WSGI 运行时绑定信息, 默认使用 127.0.0.1。."""
    host = os.environ.get("FLASK_HOST", DEFAULT_HOST)
    port = int(os.environ.get("FLASK_PORT", DEFAULT_PORT))
    return host, port


if __name__ == "__main__":
    host, port = _resolve_host_and_port()
    application.run(host=host, port=port, debug=False)
