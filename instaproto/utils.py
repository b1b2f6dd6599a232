"""
Utilities
=========
Option merging and precision-safe JSON decoding.
"""

import json
from typing import Any, Dict, Union

# Numbers longer than this many characters do not fit an IEEE double
# exactly (Number.MAX_SAFE_INTEGER has 16 digits)
MAX_SAFE_NUMBER_LENGTH = 15


def defaults_deep(options: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge `defaults` under `options`, recursively for nested dicts.

    Caller values always win, including an explicit None (e.g.
    `timeout=None` disables the default timeout); defaults only fill
    missing keys.
    Neither input is mutated.

    Example:
        >>> defaults_deep({"headers": {"A": "1"}}, {"headers": {"A": "0", "B": "2"}, "x": 1})
        {'headers': {'A': '1', 'B': '2'}, 'x': 1}
    """
    merged = dict(options)
    for key, default in defaults.items():
        if key not in merged:
            merged[key] = default
        elif isinstance(merged[key], dict) and isinstance(default, dict):
            merged[key] = defaults_deep(merged[key], default)
    return merged


def _parse_number(cast):
    def parse(text: str) -> Union[int, float, str]:
        if len(text) > MAX_SAFE_NUMBER_LENGTH:
            return text
        return cast(text)
    return parse


def loads_bigint_safe(text: Union[str, bytes]) -> Any:
    """
    json.loads that keeps long numbers as strings.

    Instagram ids (media pk, user pk) routinely exceed 15 digits;
    they are returned as their exact decimal text.

    Raises:
        json.JSONDecodeError: text is not valid JSON
    """
    return json.loads(
        text,
        parse_int=_parse_number(int),
        parse_float=_parse_number(float),
    )
