import re
from domaincms.errors import ValidationError

SLUG_RE = re.compile(r"^[a-z0-9-]+$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def get_json_body(request):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")
    return data


def require_fields(data, *fields):
    missing = [name for name in fields if data.get(name) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def validate_slug(slug, field_name="Slug"):
    if not isinstance(slug, str) or not SLUG_RE.match(slug):
        raise ValidationError(
            f"{field_name} must contain only lowercase letters, numbers, and hyphens"
        )
    return slug


def validate_choice(value, choices, field_name):
    if value not in choices:
        raise ValidationError(
            f"{field_name} must be one of: {', '.join(str(c) for c in choices)}"
        )
    return value


def validate_email(email):
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise ValidationError("Invalid email address")
    return email.strip().lower()


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y", "on")


def parse_int(value, default, minimum=None, maximum=None):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if minimum is not None and number < minimum:
        number = minimum
    if maximum is not None and number > maximum:
        number = maximum
    return number


def require_string(value, field_name):
    """Stripped non-empty string, or a 400."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    text = value.strip()
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text
