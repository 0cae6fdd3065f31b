import pytest
from flask import render_template

from crudcore.handlers import ResponseComposer
from crudcore.i18n import load_language
from crudcore.i18n.loader import language_file_path


@pytest.mark.unit
def test_load_language_reads_json_file(language_dir) -> None:
    dictionary = load_language("german", language_dir)

    assert dictionary["common"]["save"] == "Speichern"


@pytest.mark.unit
def test_load_language_missing_file_returns_empty(language_dir) -> None:
    assert load_language("klingon", language_dir) == {}


@pytest.mark.unit
@pytest.mark.parametrize("name", ["../secrets", "", "en us", "a/b"])
def test_load_language_rejects_invalid_names(language_dir, name) -> None:
    assert language_file_path(name, language_dir) is None
    assert load_language(name, language_dir) == {}


@pytest.mark.unit
def test_load_language_invalid_json_returns_empty(language_dir) -> None:
    (language_dir / "broken.json").write_text("{not json", encoding="utf-8")

    assert load_language("broken", language_dir) == {}


@pytest.mark.unit
def test_load_language_non_object_returns_empty(language_dir) -> None:
    (language_dir / "listing.json").write_text('["a", "b"]', encoding="utf-8")

    assert load_language("listing", language_dir) == {}


@pytest.mark.unit
def test_template_helpers_translate(app) -> None:
    with app.test_request_context("/"):
        ResponseComposer().ensure_language()
        rendered = render_template("i18n.html")

    assert rendered == "Save|Delete|fallback"
