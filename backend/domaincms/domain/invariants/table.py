from .exceptions import InvariantViolation


def assert_table_schema(schema):
    if not isinstance(schema, dict):
        raise InvariantViolation("Schema must be an object with a columns array")

    columns = schema.get("columns")
    if not isinstance(columns, list) or not columns:
        raise InvariantViolation("Schema must contain at least one column")

    seen = set()
    for column in columns:
        if not isinstance(column, dict) or not column.get("id") or not column.get("name"):
            raise InvariantViolation("Each column must have an id and a name")
        if column["id"] in seen:
            raise InvariantViolation(f"Duplicate column id: {column['id']}")
        seen.add(column["id"])
