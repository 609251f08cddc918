"""
Input validation helpers.

Each validator either returns the normalized value or raises ValidationError
naming the offending config field.
"""

import re
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from .exceptions import ValidationError


def _check_bounds(number, min_value, max_value, field_name: str, value: Any) -> None:
    if number < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {number}",
            field_name=field_name,
            value=value,
        )
    if max_value is not None and number > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {number}",
            field_name=field_name,
            value=value,
        )


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within [min_value, max_value].

    Booleans are rejected even though they are ints in Python, since
    `window_size = true` in TOML is always a typo.

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value,
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value,
        )
    _check_bounds(int_value, min_value, max_value, field_name, value)
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number within [min_value, max_value].

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value,
        )
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value,
        )
    if float_value != float_value:
        raise ValidationError(
            f"{field_name} must not be NaN",
            field_name=field_name,
            value=value,
        )
    _check_bounds(float_value, min_value, max_value, field_name, value)
    return float_value


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean, got {value!r}",
            field_name=field_name,
            value=value,
        )
    return value


def validate_block_device_name(device: Any, field_name: str = "device") -> str:
    """
    Validate a block device name as found under /sys/block (e.g. 'sda').

    'auto' is accepted and resolved later by the disk stats reader.

    Raises:
        ValidationError: If the name is empty or contains a path separator
    """
    if not isinstance(device, str) or not device.strip() or "/" in device:
        raise ValidationError(
            f"{field_name} must be a block device name (e.g. 'sda') or 'auto'",
            field_name=field_name,
            value=device,
        )
    return device.strip()


def validate_path(path: Union[str, Path], field_name: str = "path", must_exist: bool = False) -> Path:
    """
    Validate a filesystem path setting.

    Raises:
        ValidationError: If the path is empty, or missing when must_exist is set
    """
    if not isinstance(path, (str, Path)) or not str(path).strip():
        raise ValidationError(
            f"{field_name} must be a non-empty path",
            field_name=field_name,
            value=path,
        )
    resolved = Path(path)
    if must_exist and not resolved.exists():
        raise ValidationError(
            f"{field_name} does not exist: {resolved}",
            field_name=field_name,
            value=str(path),
        )
    return resolved


def validate_regex_pattern(pattern: str, field_name: str = "regex_pattern") -> str:
    """
    Validate that a string compiles as a regular expression.

    Raises:
        ValidationError: If pattern is empty or invalid
    """
    if not pattern or not isinstance(pattern, str):
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=pattern
        )

    try:
        re.compile(pattern)
    except re.error as e:
        raise ValidationError(
            f"{field_name} is not a valid regex pattern: {e}",
            field_name=field_name,
            value=pattern
        )

    return pattern


def validate_enum_choice(
    value: Any,
    valid_choices: Sequence[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    With case_sensitive=False the matching entry of `valid_choices` is
    returned, so 'debug' normalizes to 'DEBUG'.

    Raises:
        ValidationError: If value is not in choices
    """
    choice_list: List[str] = list(valid_choices)
    str_value = str(value)

    if case_sensitive:
        if str_value in choice_list:
            return str_value
    else:
        lower_choices = [choice.lower() for choice in choice_list]
        if str_value.lower() in lower_choices:
            return choice_list[lower_choices.index(str_value.lower())]

    raise ValidationError(
        f"{field_name} must be one of {choice_list}, got {value}",
        field_name=field_name,
        value=value
    )
