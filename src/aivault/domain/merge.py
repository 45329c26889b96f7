"""Structural merge of persisted JSON over the default state tree."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Overlay ``source`` onto ``target`` and return a new mapping.

    Mappings merge key-wise, recursively, so defaults missing from ``source``
    survive. Every other value, lists included, replaces the target value
    wholesale; lists are never merged element-wise. Neither input is mutated.
    """
    result: Dict[str, Any] = dict(target)
    for key, value in source.items():
        if isinstance(value, Mapping):
            base = target.get(key)
            result[key] = deep_merge(base if isinstance(base, Mapping) else {}, value)
        else:
            result[key] = value
    return result
