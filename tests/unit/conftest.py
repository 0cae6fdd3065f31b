# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供测试应用、测试客户端、语言文件目录与示例实体处理器。
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import pytest
from jinja2 import DictLoader

from crudcore import create_app
from crudcore.errors import ValidationError
from crudcore.handlers import BaseEntityHandler, ResponseComposer
from crudcore.i18n import Translator
from crudcore.settings import Settings
from crudcore.types import Failure

TEMPLATES = {
    "users/index.html": "admin={{ adminName }};search={{ search }};items={{ items|join(',') }};csrf={{ csrfToken }}",
    "users/row.html": "<tr>{{ name }}</tr>",
    "users/list.html": "search={{ search }};conditions={{ conditions|join(',') }}",
    "i18n.html": "{{ translate('common.save') }}|{{ 'common.delete'|t }}|{{ translate('missing.key', 'fallback') }}",
}

ENGLISH = {"common": {"save": "Save", "delete": "Delete"}, "errors": {"save_failed": "Saving failed"}}
GERMAN = {"common": {"save": "Speichern", "delete": "Löschen"}, "errors": {"save_failed": "Speichern fehlgeschlagen"}}

USERS_TABLE_CONFIG = {
    "users": {"id": "id", "name": "name", "email": "email", "identifier": "id"},
}
USERS_HANDLER_CONFIG = {
    "searchqueue": "search",
    "lookup": {
        "conditions": {
            "byName": {"field": "name", "operator": "like"},
            "byNickname": {
                "type": "conditionalFallback",
                "if": {"field": "nickname"},
                "then": {"field": "nickname"},
                "else": {"field": "name"},
            },
        },
    },
}


class UsersHandler(BaseEntityHandler):
    """测试用实体处理器,记录保存的插入数组."""

    def __init__(self, save_result: Any = None, composer: ResponseComposer | None = None) -> None:
        super().__init__(USERS_TABLE_CONFIG, USERS_HANDLER_CONFIG, composer=composer)
        self.save_result = save_result if save_result is not None else Failure.of("保存失败")
        self.saved: list[dict[str, Any]] = []

    def default_response(self, request, post_data: Mapping[str, Any]):
        return self.html_response("users/index.html", post_data)

    def generate_template_data(self, post_data, feedback=None):
        return {"items": sorted(post_data)}

    def save(self, post_data):
        self.saved.append(self.generate_insert_array("users", post_data))
        return self.save_result

    def delete(self, post_data):
        return self.json_response("users/row.html", 200, {"name": post_data.get("name")})

    def get_lookup_result(self, request, post_data, feedback=None):
        conditions = self.generate_lookup_conditions(post_data)
        return self.json_response(
            "users/list.html",
            200,
            {"search": post_data["search"], "conditions": sorted(conditions)},
        )

    def handle_extra_config(self, request, post_data):
        if post_data["config"] == "lookup":
            return self.handle_lookup(request, dict(post_data))
        if post_data["config"] == "invalid":
            raise ValidationError("名称不能为空")
        return super().handle_extra_config(request, post_data)


class StubAuthProvider:
    """可控的认证协作者."""

    def __init__(self, user: Any = None, settings: Mapping[str, Any] | None = None, prefix: str = "user_") -> None:
        self.user = user
        self.settings = dict(settings or {})
        self.prefix = prefix

    def get_user(self):
        return self.user

    def get_user_settings(self):
        return self.settings

    def settings_table_prefix(self):
        return self.prefix


class RecordingRenderer:
    """记录渲染调用的模板渲染器."""

    def __init__(self, output: str = "rendered") -> None:
        self.output = output
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def render(self, template_name, attributes):
        self.calls.append((template_name, dict(attributes)))
        return self.output


@pytest.fixture(autouse=True)
def _reset_translator():
    Translator.reset()
    yield
    Translator.reset()


@pytest.fixture
def language_dir(tmp_path):
    directory = tmp_path / "languages"
    directory.mkdir()
    (directory / "english.json").write_text(json.dumps(ENGLISH), encoding="utf-8")
    (directory / "german.json").write_text(json.dumps(GERMAN), encoding="utf-8")
    return directory


@pytest.fixture
def app(monkeypatch, language_dir):
    """创建测试应用实例."""
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("SECRET_KEY", "test-secret-key")
    monkeypatch.setenv("LANGUAGE_DIR", str(language_dir))
    monkeypatch.setenv("DEFAULT_LANGUAGE", "english")
    monkeypatch.setenv("WTF_CSRF_ENABLED", "false")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("RECORD_QUERIES", raising=False)

    app = create_app(settings=Settings.load())
    app.jinja_loader = DictLoader(TEMPLATES)
    return app


@pytest.fixture
def client(app):
    """创建测试客户端."""
    return app.test_client()


@pytest.fixture
def users_handler_cls():
    """示例实体处理器类."""
    return UsersHandler


@pytest.fixture
def recording_renderer():
    return RecordingRenderer


@pytest.fixture
def stub_auth_provider():
    return StubAuthProvider
