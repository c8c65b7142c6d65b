"""
Parsing of COCO-style option strings.

Suites and observers are configured with flat strings such as:

    "dimensions: 2,3,5 instance_indices: 1-3"
    "result_folder: RS_on_bbob algorithm_name: RS algorithm_info \"Random search\""

A key is a word optionally followed by a colon; the value is either a
double-quoted string or a run of non-blank characters.
"""

import re
from typing import Dict, Iterable, List

from .exceptions import ConfigurationError

_OPTION = re.compile(r'\s*([A-Za-z_][A-Za-z0-9_]*)\s*:?\s*(?:"([^"]*)"|([^\s"]+))')


def parse_options(options: str, allowed: Iterable[str], context: str = "options") -> Dict[str, str]:
    """
    Parse an option string into a dict.

    Args:
        options: Raw option string (may be empty)
        allowed: Recognized keys
        context: Label used in error messages

    Returns:
        Dict mapping keys to raw string values

    Raises:
        ConfigurationError: On malformed input or unrecognized keys
    """
    allowed = set(allowed)
    parsed: Dict[str, str] = {}
    position = 0
    text = options or ""

    while position < len(text):
        if not text[position:].strip():
            break
        match = _OPTION.match(text, position)
        if match is None:
            raise ConfigurationError(f"Malformed {context} near '{text[position:].strip()}'")
        key = match.group(1)
        value = match.group(2) if match.group(2) is not None else match.group(3)
        if key not in allowed:
            raise ConfigurationError(
                f"Unrecognized key '{key}' in {context}. Supported: {sorted(allowed)}"
            )
        parsed[key] = value
        position = match.end()

    return parsed


def parse_int_list(value: str, context: str = "value") -> List[int]:
    """
    Parse comma-separated integers with inclusive ranges, e.g. "1-3,7".

    Raises:
        ConfigurationError: If an entry is not an integer or range
    """
    numbers: List[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start, end = part.split("-", 1)
                low, high = int(start), int(end)
                if low > high:
                    raise ValueError(part)
                numbers.extend(range(low, high + 1))
            else:
                numbers.append(int(part))
        except ValueError as e:
            raise ConfigurationError(f"Invalid {context} entry '{part}'", original_error=e) from e
    return numbers
