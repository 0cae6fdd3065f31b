import pytest
from flask import g, request

from crudcore.forms import extract_form_data
from crudcore.handlers import fetch_post_data


@pytest.mark.unit
def test_extract_form_data_prefers_json(app) -> None:
    with app.test_request_context("/", method="POST", json={"config": "submit", "name": " a "}):
        assert extract_form_data(request) == {"config": "submit", "name": "a"}


@pytest.mark.unit
def test_extract_form_data_reads_parsed_form(app) -> None:
    with app.test_request_context("/", method="POST", data={"config": "delete", "ids[]": ["1", "2"]}):
        assert extract_form_data(request) == {"config": "delete", "ids": ["1", "2"]}


@pytest.mark.unit
def test_extract_form_data_falls_back_to_raw_json_body(app) -> None:
    with app.test_request_context("/", method="POST", data='{"config": "submit"}', content_type="text/plain"):
        assert extract_form_data(request) == {"config": "submit"}


@pytest.mark.unit
def test_extract_form_data_ignores_invalid_or_non_object_bodies(app) -> None:
    with app.test_request_context("/", method="POST", data="{broken", content_type="text/plain"):
        assert extract_form_data(request) == {}
    with app.test_request_context("/", method="POST", json=["a", "b"]):
        assert extract_form_data(request) == {}


@pytest.mark.unit
def test_middleware_attaches_form_data_for_post_only(app, client) -> None:
    seen: list[object] = []

    @app.route("/probe", methods=["GET", "POST"])
    def probe() -> str:
        seen.append(getattr(g, "form_data", None))
        return "ok"

    client.post("/probe", data={"name": "x"})
    client.get("/probe?name=y")

    assert seen == [{"name": "x"}, None]


@pytest.mark.unit
def test_fetch_post_data_prefers_middleware_data(app) -> None:
    with app.test_request_context("/", method="POST", data={"name": "from-body"}):
        g.form_data = {"name": "from-middleware"}
        assert fetch_post_data(request) == {"name": "from-middleware"}


@pytest.mark.unit
def test_fetch_post_data_falls_back_to_parsed_body(app) -> None:
    with app.test_request_context("/", method="POST", data={"name": " from-body "}):
        assert fetch_post_data(request) == {"name": "from-body"}
