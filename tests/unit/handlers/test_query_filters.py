import pytest

from crudcore import db
from crudcore.handlers import apply_lookup_conditions, build_lookup_conditions
from crudcore.handlers.query_filters import condition_expression


class Person(db.Model):
    __tablename__ = "people"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    nickname = db.Column(db.String(64), nullable=True)


CONFIG = {
    "searchqueue": "search",
    "lookup": {
        "conditions": {
            "byNickname": {
                "type": "conditionalFallback",
                "if": {"field": "nickname"},
                "then": {"field": "nickname", "operator": "startswith"},
                "else": {"field": "name", "operator": "startswith"},
            },
        },
    },
}


@pytest.fixture
def people(app):
    with app.app_context():
        db.create_all()
        db.session.add_all(
            [
                Person(name="alice", nickname="ally"),
                Person(name="alfred", nickname=None),
                Person(name="bob", nickname="albert"),
                Person(name="carol", nickname=None),
            ],
        )
        db.session.commit()
        yield
        db.session.remove()
        db.drop_all()


def _names(conditions) -> list[str]:
    query = apply_lookup_conditions(Person.query, Person, conditions)
    return sorted(person.name for person in query.all())


@pytest.mark.unit
@pytest.mark.usefixtures("people")
def test_like_condition_matches_substring() -> None:
    conditions = {"byName": {"field": "name", "queue": "ro"}}

    assert _names(conditions) == ["carol"]


@pytest.mark.unit
@pytest.mark.usefixtures("people")
def test_like_condition_escapes_wildcards() -> None:
    assert _names({"byName": {"field": "name", "queue": "%"}}) == []


@pytest.mark.unit
@pytest.mark.usefixtures("people")
def test_fallback_uses_then_branch_when_column_present() -> None:
    conditions = build_lookup_conditions(CONFIG, {"search": "al"})

    # alice/bob 有昵称,按昵称匹配;alfred 无昵称,按名称匹配
    assert _names(conditions) == ["alfred", "alice", "bob"]


@pytest.mark.unit
@pytest.mark.usefixtures("people")
def test_conditions_are_combined_with_or() -> None:
    conditions = {
        "exact": {"field": "name", "operator": "equals", "queue": "carol"},
        "prefix": {"field": "name", "operator": "startswith", "queue": "bo"},
    }

    assert _names(conditions) == ["bob", "carol"]


@pytest.mark.unit
@pytest.mark.usefixtures("people")
def test_empty_conditions_leave_query_unchanged() -> None:
    assert _names({}) == ["alfred", "alice", "bob", "carol"]


@pytest.mark.unit
def test_unknown_column_yields_no_expression() -> None:
    assert condition_expression(Person, {"field": "missing", "queue": "x"}) is None
