import pytest

from domaincms.domain.invariants.exceptions import InvariantViolation
from domaincms.domain.invariants.section import parse_sections, assert_sections_reference_children
from domaincms.domain.sections import load_sections, unorganized_page_ids, without_page


def section(**overrides):
    data = {"title": "Guides", "column": 1, "order": 1, "pageIds": ["p1"]}
    data.update(overrides)
    return data


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"title": "x"}, "Sections must be an array"),
        ([section(title="  ")], "Each section must have a title"),
        ([section(column=4)], "valid column (1, 2, or 3)"),
        ([section(column=True)], "valid column (1, 2, or 3)"),
        ([section(order="1")], "numeric order"),
        ([section(pageIds="p1")], "pageIds array"),
    ],
)
def test_parse_sections_rejects_bad_input(raw, message):
    with pytest.raises(InvariantViolation) as exc:
        parse_sections(raw)
    assert message in str(exc.value)


def test_parse_sections_returns_typed_configs():
    parsed = parse_sections([section(), section(title="Tools", column=2, pageIds=[])])
    assert [s.title for s in parsed] == ["Guides", "Tools"]
    assert parsed[1].column == 2
    assert parsed[0].to_dict() == {"title": "Guides", "column": 1, "order": 1, "pageIds": ["p1"]}


def test_non_child_reference_is_rejected():
    parsed = parse_sections([section(pageIds=["p1", "stranger"])])
    with pytest.raises(InvariantViolation) as exc:
        assert_sections_reference_children(parsed, ["p1", "p2"])
    assert "Page ID stranger is not a child of this page" in str(exc.value)


def test_unorganized_is_set_difference_in_child_order():
    sections = load_sections([section(pageIds=["p3"]), section(pageIds=["p1"])])
    assert unorganized_page_ids(["p1", "p2", "p3", "p4"], sections) == ["p2", "p4"]


def test_without_page_removes_id_everywhere():
    raw = [section(pageIds=["p1", "p2"]), section(title="Other", pageIds=["p1"])]
    cleaned = without_page(raw, "p1")
    assert [s["pageIds"] for s in cleaned] == [["p2"], []]
