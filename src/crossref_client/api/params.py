"""Query parameter encoding for Crossref's filter and facet syntax."""

from collections.abc import Mapping
from typing import Any

RESERVED_KEYS = ("filter", "facet")


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_reserved(values: Mapping) -> str:
    """Encode a name -> value(s) mapping as ``name:value,name:value``.

    Example:
        >>> encode_reserved({"a": 1, "b": [True, False]})
        'a:1,b:true,b:false'
    """
    parts = []
    for name, value in values.items():
        elements = value if isinstance(value, (list, tuple)) else [value]
        for element in elements:
            parts.append(f"{name}:{_render(element)}")
    return ",".join(parts)


def encode_parameters(parameters: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``parameters`` with ``filter``/``facet`` mappings flattened.

    Values under the reserved keys that are not mappings (for example an
    already encoded string) are passed through, as are all other keys.
    """
    encoded = dict(parameters)
    for key in RESERVED_KEYS:
        value = encoded.get(key)
        if isinstance(value, Mapping):
            encoded[key] = encode_reserved(value)
    return encoded
