import re

_RANGE_PATTERN = re.compile(r"^\s*([\d.]+)\s*-\s*([\d.]+)\s*$")
_SINGLE_PATTERN = re.compile(r"^\s*([\d.]+)\s*$")


def parse_density_value(value: str) -> float:
    """Parse a density cell into a float.

    Reference sheets give either a single value or a ``low-high`` range;
    for a range the upper bound is used.

    Examples:
        >>> parse_density_value("1.5")
        1.5
        >>> parse_density_value("0.8 - 1.1")
        1.1

    Raises:
        ValueError: If the value is neither a number nor a range of numbers.
    """
    match = _RANGE_PATTERN.match(value)
    if match:
        text = match.group(2)
    else:
        match = _SINGLE_PATTERN.match(value)
        if not match:
            raise ValueError(f"could not parse density value: {value!r}")
        text = match.group(1)

    try:
        return float(text)
    except ValueError:
        raise ValueError(f"could not parse density value: {value!r}") from None
