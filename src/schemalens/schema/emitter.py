"""Serialize materialized values to block-style YAML or to JSON text.

:func:`to_json` is a plain structural dump.  :func:`to_yaml` is a small,
dependency-free block emitter with a deliberately conservative quoting rule:
a string is written bare only when it is a safe bareword *and* a YAML 1.1
parser would read it back as the same string.  Everything else is
JSON-quoted, which is a valid YAML double-quoted scalar once the characters
YAML folds or rejects (DEL, C1 controls, NEL, line and paragraph
separators, surrogates, U+FFFE/U+FFFF) are written as ``\\uXXXX`` escapes.

Non-finite numbers are never emitted; ``0`` is substituted.

The lookup tables below are constants owned by this module.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

_BAREWORD_RE = re.compile(r"^[A-Za-z0-9._/=-]+$")

# Plain scalars a YAML 1.1 resolver would turn into numbers or dates.
_NUMERIC_LIKE_RE = re.compile(r"^[-+.]?[0-9]")

_YAML_KEYWORDS = frozenset({"true", "false", "null", "~", "yes", "no", "on", "off"})

_YAML_SPECIAL = frozenset({"-", "=", "---", "...", ".inf", "-.inf", "+.inf", ".nan"})

_NON_PRINTABLE_RE = re.compile("[\x7f-\x9f\u2028\u2029\ud800-\udfff\ufffe\uffff]")

_INDENT = "  "


def to_json(value: Any) -> str:
    """Return *value* as pretty-printed JSON (2-space indent)."""
    return json.dumps(_finite(value), indent=2, ensure_ascii=False)


def to_yaml(value: Any) -> str:
    """Return *value* as block-style YAML text ending with a newline.

    Empty mappings and sequences render as ``{}`` and ``[]``.  Sequence
    items that are themselves collections get a bare ``-`` line followed by
    the nested block indented two more spaces.

    Example::

        >>> print(to_yaml({"id": "string", "tags": ["a"]}), end="")
        id: string
        tags:
          - a
    """
    return "\n".join(_render(value, 0)) + "\n"


def _render(value: Any, level: int) -> list[str]:
    pad = _INDENT * level
    if isinstance(value, dict):
        if not value:
            return [pad + "{}"]
        return _render_mapping(value, level)
    if isinstance(value, (list, tuple)):
        if not value:
            return [pad + "[]"]
        return _render_sequence(value, level)
    return [pad + _scalar(value)]


def _render_mapping(mapping: dict[Any, Any], level: int) -> list[str]:
    pad = _INDENT * level
    lines: list[str] = []
    for key, item in mapping.items():
        label = _scalar(str(key))
        if _is_nested(item):
            lines.append(f"{pad}{label}:")
            lines.extend(_render(item, level + 1))
        else:
            lines.append(f"{pad}{label}: {_inline(item)}")
    return lines


def _render_sequence(items: Any, level: int) -> list[str]:
    pad = _INDENT * level
    lines: list[str] = []
    for item in items:
        if _is_nested(item):
            lines.append(f"{pad}-")
            lines.extend(_render(item, level + 1))
        else:
            lines.append(f"{pad}- {_inline(item)}")
    return lines


def _is_nested(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple)) and len(value) > 0


def _inline(value: Any) -> str:
    if isinstance(value, dict):
        return "{}"
    if isinstance(value, (list, tuple)):
        return "[]"
    return _scalar(value)


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_text(value)
    text = value if isinstance(value, str) else str(value)
    if _is_bare(text):
        return text
    return _quote(text)


def _quote(text: str) -> str:
    quoted = json.dumps(text, ensure_ascii=False)
    return _NON_PRINTABLE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", quoted)


def _is_bare(text: str) -> bool:
    if not _BAREWORD_RE.match(text):
        return False
    lowered = text.lower()
    if lowered in _YAML_KEYWORDS or lowered in _YAML_SPECIAL:
        return False
    return not _NUMERIC_LIKE_RE.match(text)


def _float_text(value: float) -> str:
    if not math.isfinite(value):
        return "0"
    if value.is_integer() and abs(value) < 1e16:
        return f"{value:.1f}"
    text = repr(value)
    # YAML 1.1 floats need a dot in the mantissa ("1e-05" would load as a string).
    if "e" in text and "." not in text.split("e", 1)[0]:
        mantissa, exponent = text.split("e", 1)
        text = f"{mantissa}.0e{exponent}"
    return text


def _finite(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite(item) for item in value]
    return value
