from pydantic import ValidationError as PydanticValidationError

from cmis_portal.core.exceptions import ValidationError


def _field_label(loc) -> str:
    return ".".join(str(part) for part in loc if part not in ("body", "query", "path"))


def to_validation_error(exc: PydanticValidationError) -> ValidationError:
    """Turn the first pydantic error into a single readable 400"""
    errors = exc.errors()
    if not errors:
        return ValidationError("Invalid request")

    first = errors[0]
    field = _field_label(first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    # "Value error, x cannot be empty" -> "x cannot be empty"
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]

    if field:
        return ValidationError(f"Invalid value for {field}: {message}", field=field)
    return ValidationError(message)
