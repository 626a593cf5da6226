import re
from flask import current_app, has_app_context
from sqlalchemy import or_, type_coerce, String

ALL_COUNTRIES = "ALL"
DEFAULT_COUNTRY = "US"

SUPPORTED_COUNTRIES = {
    "IN": "India",
    "US": "United States",
    "GB": "United Kingdom",
    "AU": "Australia",
    "CA": "Canada",
}

COUNTRY_COOKIE = "user-country"

_COUNTRY_CODE_RE = re.compile(r"^[A-Z]{2}$")


def is_visible_to_country(target_countries, user_country):
    """
    True when content targeted at ``target_countries`` is visible to
    ``user_country``: the list is empty, holds ``ALL``, or holds the code.
    """
    if not target_countries:
        return True

    codes = {str(code).strip().upper() for code in target_countries}
    if ALL_COUNTRIES in codes:
        return True

    return (user_country or "").upper() in codes


def configured_default_country():
    if has_app_context():
        return current_app.config.get("DEFAULT_COUNTRY", DEFAULT_COUNTRY)
    return DEFAULT_COUNTRY


def normalize_country_code(value, default=DEFAULT_COUNTRY):
    if not value:
        return default
    code = str(value).strip().upper()
    if not _COUNTRY_CODE_RE.match(code):
        return default
    return code


def parse_target_countries(value):
    """
    Normalize a target-countries payload to a list of upper-case codes.

    Accepts a list or a comma separated string. Empty input means
    everyone, i.e. ``["ALL"]``.
    """
    if value is None:
        return [ALL_COUNTRIES]

    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValueError("targetCountries must be a list of country codes")

    codes = []
    for item in items:
        code = str(item).strip().upper()
        if code and code not in codes:
            codes.append(code)

    return codes or [ALL_COUNTRIES]


def invalid_country_codes(codes):
    return [
        code for code in codes
        if code != ALL_COUNTRIES and code not in SUPPORTED_COUNTRIES
    ]


def country_visibility_clause(column, user_country):
    """
    SQL form of ``is_visible_to_country`` for a ``CountryList`` column.

    The column is coerced to a plain string so the comparison literals
    skip the list bind processor.
    """
    raw = type_coerce(column, String)
    code = normalize_country_code(user_country, default=configured_default_country())
    return or_(
        column.is_(None),
        raw == "",
        raw.like(f"%,{ALL_COUNTRIES},%"),
        raw.like(f"%,{code},%"),
    )
