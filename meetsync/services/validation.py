from meetsync.errors import ValidationError


def require_id(value: str | None, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} must be a non-empty string")
    return value
