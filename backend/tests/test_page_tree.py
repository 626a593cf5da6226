import pytest

from domaincms.domain.invariants.exceptions import InvariantViolation
from domaincms.domain.invariants.page import assert_parent_allowed
from domaincms.domain.page_tree import PageTree


@pytest.fixture()
def tree():
    #   root
    #   ├── a
    #   │   ├── a1
    #   │   │   └── a1x
    #   │   └── a2
    #   └── b
    return PageTree([
        ("root", None),
        ("a", "root"),
        ("b", "root"),
        ("a1", "a"),
        ("a2", "a"),
        ("a1x", "a1"),
    ])


def test_descendants_breadth_first_with_depth(tree):
    assert tree.descendants("a") == [("a1", 1), ("a2", 1), ("a1x", 2)]
    assert tree.descendants("b") == []


def test_descendants_deepest_first(tree):
    ordered = tree.descendants_deepest_first("root")
    assert ordered[0] == "a1x"
    assert set(ordered) == {"a", "b", "a1", "a2", "a1x"}
    assert ordered.index("a1") < ordered.index("a")


def test_ancestors_and_descendant_check(tree):
    assert tree.ancestors("a1x") == ["a1", "a", "root"]
    assert tree.is_descendant_of("a1x", "a")
    assert not tree.is_descendant_of("b", "a")
    assert not tree.is_descendant_of("a", "a1x")


def test_cycles_terminate():
    cyclic = PageTree([("x", "y"), ("y", "x")])
    assert cyclic.descendants("x") == [("y", 1)]
    assert cyclic.ancestors("x") == ["y"]


def test_parent_guard(tree):
    assert_parent_allowed(tree, page_id="a", parent_id="b")
    assert_parent_allowed(tree, page_id="a", parent_id=None)

    with pytest.raises(InvariantViolation):
        assert_parent_allowed(tree, page_id="a", parent_id="a")

    with pytest.raises(InvariantViolation):
        assert_parent_allowed(tree, page_id="a", parent_id="a1x")
