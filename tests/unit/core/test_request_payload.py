import pytest
from werkzeug.datastructures import MultiDict

from crudcore.utils.request_payload import parse_payload


@pytest.mark.unit
def test_parse_payload_multidict_takes_last_value_and_bracket_lists() -> None:
    payload = MultiDict([("name", "a"), ("name", "b"), ("tags[]", "x"), ("tags[]", "y")])

    assert parse_payload(payload) == {"name": "b", "tags": ["x", "y"]}


@pytest.mark.unit
def test_parse_payload_list_fields_force_list_shape() -> None:
    payload = MultiDict([("ids", "1")])

    assert parse_payload(payload, list_fields=["ids"]) == {"ids": ["1"]}


@pytest.mark.unit
def test_parse_payload_strips_nul_and_whitespace() -> None:
    result = parse_payload({"name": " al\x00ice ", "nested": {"note": "\x00x "}, "items": [" a "]})

    assert result == {"name": "alice", "nested": {"note": "x"}, "items": ["a"]}


@pytest.mark.unit
def test_parse_payload_preserves_password_and_raw_fields() -> None:
    result = parse_payload({"password": " p w ", "token": " t "}, preserve_raw_fields=["token"])

    assert result == {"password": " p w ", "token": " t "}


@pytest.mark.unit
def test_parse_payload_keeps_non_string_scalars() -> None:
    assert parse_payload({"count": 3, "enabled": False, "missing": None}) == {
        "count": 3,
        "enabled": False,
        "missing": None,
    }


@pytest.mark.unit
def test_parse_payload_rejects_other_types() -> None:
    assert parse_payload(None) == {}
    with pytest.raises(TypeError):
        parse_payload(["a"])
