import pytest
from flask import g

from crudcore.auth import capture_admin_context
from crudcore.handlers import ResponseComposer
from crudcore.i18n import Translator


@pytest.mark.unit
def test_json_response_success_renders_template(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    renderer = recording_renderer("<li>ok</li>")
    composer = ResponseComposer(renderer=renderer, auth_provider=stub_auth_provider())

    with app.test_request_context("/users"):
        response = composer.json_response("users/row.html", 200, {"name": "bob"})

    assert response.status_code == 200
    assert response.get_json() == {"html": "<li>ok</li>"}
    assert renderer.calls == [("users/row.html", {"name": "bob"})]


@pytest.mark.unit
def test_json_response_failure_skips_rendering(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    renderer = recording_renderer()
    composer = ResponseComposer(renderer=renderer, auth_provider=stub_auth_provider())

    with app.test_request_context("/users"):
        response = composer.json_response("users/row.html", 422, None, ["无效"])

    assert response.status_code == 422
    assert response.get_json() == {"messages": ["无效"]}
    assert renderer.calls == []


@pytest.mark.unit
def test_json_response_success_requires_template(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    composer = ResponseComposer(renderer=recording_renderer(), auth_provider=stub_auth_provider())

    with app.test_request_context("/users"), pytest.raises(ValueError):
        composer.json_response(None, 200)


@pytest.mark.unit
def test_render_html_adds_admin_attributes_when_authenticated(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    renderer = recording_renderer()
    user = object()
    auth = stub_auth_provider(user=user, settings={"theme": "dark"})
    composer = ResponseComposer(renderer=renderer, auth_provider=auth)

    with app.test_request_context("/users"):
        g.admin_name = "root"
        g.user_path = "/admin/root"
        g.csrf_token = "token-1"
        capture_admin_context(auth)
        composer.render_html("users/row.html", {"name": "bob"})

    _, attributes = renderer.calls[0]
    assert attributes["name"] == "bob"
    assert attributes["adminName"] == "root"
    assert attributes["userPath"] == "/admin/root"
    assert attributes["user"] is user
    assert attributes["userSettings"] == {"theme": "dark"}
    assert attributes["language"]["common"]["save"] == "Save"
    assert attributes["csrfToken"] == "token-1"
    assert attributes["queryLog"] == []


@pytest.mark.unit
def test_render_html_anonymous_request_has_no_admin_attributes(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    renderer = recording_renderer()
    auth = stub_auth_provider(user=object())
    composer = ResponseComposer(renderer=renderer, auth_provider=auth)

    with app.test_request_context("/users"):
        capture_admin_context(auth)
        composer.render_html("users/row.html", {"name": "bob"})

    assert renderer.calls == [("users/row.html", {"name": "bob"})]


@pytest.mark.unit
def test_user_language_preference_switches_dictionary(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    auth = stub_auth_provider(user=object(), settings={"user_language": "german"})
    composer = ResponseComposer(renderer=recording_renderer(), auth_provider=auth)

    with app.test_request_context("/users"):
        g.admin_name = "root"
        context = composer.ensure_language(capture_admin_context(auth))

    assert context.code == "german"
    assert context.translate("common.save") == "Speichern"
    assert Translator.active_code() == "german"


@pytest.mark.unit
def test_default_language_loaded_once(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    composer = ResponseComposer(renderer=recording_renderer(), auth_provider=stub_auth_provider())

    with app.test_request_context("/users"):
        first = composer.ensure_language()
        second = composer.ensure_language()

    assert first.code == "english"
    assert first is second


@pytest.mark.unit
def test_html_response_mirrors_search_value(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    renderer = recording_renderer("<div></div>")
    composer = ResponseComposer(renderer=renderer, auth_provider=stub_auth_provider())
    handler = users_handler_cls(composer=composer)

    with app.test_request_context("/users"):
        response = handler.html_response("users/index.html", {"search": "ali"})
        handler.html_response("users/index.html", {"search": ""})

    assert response.mimetype == "text/html"
    assert renderer.calls[0][1] == {"items": ["search"], "search": "ali"}
    assert "search" not in renderer.calls[1][1]


@pytest.mark.unit
def test_html_response_with_attributes_always_sets_admin_name(app, recording_renderer, stub_auth_provider, users_handler_cls) -> None:
    renderer = recording_renderer()
    composer = ResponseComposer(renderer=renderer, auth_provider=stub_auth_provider())

    with app.test_request_context("/users"):
        composer.html_response_with_attributes("users/row.html", {"name": "bob"})

    assert renderer.calls[0][1] == {"name": "bob", "adminName": None}


@pytest.mark.unit
def test_installed_dictionary_without_code_survives_render(app, recording_renderer, stub_auth_provider) -> None:
    Translator.set_language({"common": {"save": "Custom"}})
    renderer = recording_renderer()
    composer = ResponseComposer(renderer=renderer, auth_provider=stub_auth_provider())

    with app.test_request_context("/users"):
        composer.render_html("users/row.html", {})
        composer.render_html("users/row.html", {})

    assert Translator.translate("common.save") == "Custom"
    assert Translator.active_code() is None


@pytest.mark.unit
def test_installed_dictionary_kept_for_user_without_preference(app, recording_renderer, stub_auth_provider) -> None:
    Translator.set_language({"common": {"save": "Custom"}}, code="custom")
    auth = stub_auth_provider(user=object(), settings={})
    renderer = recording_renderer()
    composer = ResponseComposer(renderer=renderer, auth_provider=auth)

    with app.test_request_context("/users"):
        g.admin_name = "root"
        capture_admin_context(auth)
        composer.render_html("users/row.html", {})

    assert renderer.calls[0][1]["language"]["common"]["save"] == "Custom"
    assert Translator.active_code() == "custom"


@pytest.mark.unit
def test_installed_dictionary_replaced_when_preference_differs(app, recording_renderer, stub_auth_provider) -> None:
    Translator.set_language({"common": {"save": "Custom"}})
    auth = stub_auth_provider(user=object(), settings={"user_language": "german"})
    composer = ResponseComposer(renderer=recording_renderer(), auth_provider=auth)

    with app.test_request_context("/users"):
        g.admin_name = "root"
        capture_admin_context(auth)
        composer.render_html("users/row.html", {})

    assert Translator.translate("common.save") == "Speichern"
