from .exceptions import InvariantViolation


def assert_page_deletable(page):
    if page.is_main:
        raise InvariantViolation("Cannot delete the main page")


def assert_parent_allowed(tree, *, page_id, parent_id):
    """
    Guards page moves against cycles.

    A page may not become its own parent, nor a child of any page in
    its own subtree.
    """
    if parent_id is None:
        return

    if parent_id == page_id:
        raise InvariantViolation("A page cannot be its own parent")

    if tree.is_descendant_of(parent_id, page_id):
        raise InvariantViolation(
            "Cannot move a page under one of its own descendants"
        )
