from numbers import Number
from domaincms.domain.sections import SectionConfig, VALID_COLUMNS
from .exceptions import InvariantViolation


def parse_sections(raw):
    """
    Validate a raw ``sections`` payload and return typed section configs.

    Structural checks only; child membership is checked by
    ``assert_sections_reference_children``.
    """
    if not isinstance(raw, list):
        raise InvariantViolation("Sections must be an array")

    sections = []
    for item in raw:
        if not isinstance(item, dict):
            raise InvariantViolation("Each section must be an object")

        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            raise InvariantViolation("Each section must have a title")

        column = item.get("column")
        if isinstance(column, bool) or column not in VALID_COLUMNS:
            raise InvariantViolation(
                "Each section must have a valid column (1, 2, or 3)"
            )

        order = item.get("order")
        if isinstance(order, bool) or not isinstance(order, Number):
            raise InvariantViolation("Each section must have a numeric order")

        page_ids = item.get("pageIds")
        if not isinstance(page_ids, list) or not all(isinstance(p, str) for p in page_ids):
            raise InvariantViolation("Each section must have a pageIds array")

        sections.append(
            SectionConfig(
                title=title.strip(),
                column=int(column),
                order=order,
                page_ids=list(page_ids),
            )
        )

    return sections


def assert_sections_reference_children(sections, child_ids):
    allowed = set(child_ids)
    for section in sections:
        for page_id in section.page_ids:
            if page_id not in allowed:
                raise InvariantViolation(
                    f"Page ID {page_id} is not a child of this page"
                )
