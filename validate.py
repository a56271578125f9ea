"""Flag presence checks run before any SDK call."""

from errors import ValidationError

EMPTY_MESSAGE = "{} cannot be empty"


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        raise TypeError(f"unsupported type {type(value).__name__}")
    if isinstance(value, str):
        return value == ''
    if isinstance(value, int):
        return value == 0
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    raise TypeError(f"unsupported type {type(value).__name__}")


def not_empty(settings, keys: list[str]) -> None:
    """
    Validate that every key has a non-empty value in settings.

    Strings must be non-empty, integers non-zero and lists non-empty. All
    problems are reported together, chained with ': '.

    Args:
        settings: config.Settings (anything with a get(key) method)
        keys: Flag names to check

    Raises:
        ValidationError: If settings is None or any key is empty
    """
    if settings is None:
        raise ValidationError("settings cannot be None")

    problems = []
    for key in keys:
        try:
            if _is_empty(settings.get(key)):
                problems.append(EMPTY_MESSAGE.format(key))
        except TypeError as e:
            problems.append(str(e))

    if problems:
        raise ValidationError(': '.join(problems))
