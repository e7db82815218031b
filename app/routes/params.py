def parse_positive_int(value: str | None, default: int | None = None) -> int | None:
    """
    Lenient query-string integer parsing: missing, non-numeric or non-positive
    values fall back to `default` instead of producing a validation error.
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
