from flask import current_app, request
from domaincms.utils.validators import parse_int


def page_args(size_param="pageSize"):
    """Read ``page`` and a page-size query arg, clamped to configured bounds."""
    default_size = current_app.config.get("DEFAULT_PAGE_SIZE", 25)
    max_size = current_app.config.get("MAX_PAGE_SIZE", 100)

    page = parse_int(request.args.get("page"), 1, minimum=1)
    per_page = parse_int(request.args.get(size_param), default_size, minimum=1, maximum=max_size)
    return page, per_page


def paginate_query(query, *, page, per_page):
    """
    Offset pagination for admin listings.

    Returns the Flask-SQLAlchemy pagination object; out-of-range pages
    yield an empty item list rather than a 404.
    """
    return query.paginate(page=page, per_page=per_page, error_out=False)
