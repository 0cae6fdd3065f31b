"""语言文件加载.

语言文件按名称存放为 ``<language_dir>/<name>.json``,内容为嵌套的字符串字典.
文件缺失时返回空字典,不向调用方暴露错误.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from crudcore.utils.structlog_config import get_logger

_LANGUAGE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

logger = get_logger("i18n")


def language_file_path(name: str, directory: str | Path) -> Path | None:
    """返回语言文件路径,名称非法时返回 None."""
    if not _LANGUAGE_NAME_PATTERN.match(name or ""):
        return None
    return Path(directory) / f"{name}.json"


def load_language(name: str, directory: str | Path) -> dict[str, object]:
    """读取指定语言的字典.

    Args:
        name: 语言名称,只允许字母、数字、下划线与短横线.
        directory: 语言文件目录.

    Returns:
        解析后的字典;文件缺失、名称非法或内容不是 JSON 对象时返回空字典.

    """
    path = language_file_path(name, directory)
    if path is None:
        logger.warning("语言名称非法,使用空字典", module="i18n", language=name)
        return {}
    if not path.is_file():
        logger.debug("语言文件不存在,使用空字典", module="i18n", language=name, path=str(path))
        return {}

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("语言文件读取失败,使用空字典", module="i18n", language=name, error=str(exc))
        return {}

    if not isinstance(payload, dict):
        logger.warning("语言文件顶层必须为对象,使用空字典", module="i18n", language=name)
        return {}
    return payload
