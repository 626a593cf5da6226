from sqlalchemy.types import TypeDecorator, String


class CountryList(TypeDecorator):
    """
    Stores a list of country codes as a delimited string: ``",IN,US,"``.

    The leading and trailing delimiters let a single ``LIKE '%,IN,%'``
    match whole codes only. An empty list is stored as ``""`` and means
    "visible everywhere".
    """

    impl = String(255)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        codes = [str(code).strip().upper() for code in value if str(code).strip()]
        if not codes:
            return ""
        return "," + ",".join(codes) + ","

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return [code for code in value.split(",") if code]
