"""Payload validation for project, item and element writes.

Names follow the editor's long-standing rules: a usable name is a non-empty
string that is not the literal ``"undefined"``/``"null"`` and does not read
as a browser number literal. That is a decimal with optional exponent, a
signed ``Infinity``, or an unsigned ``0x``/``0b``/``0o`` integer. Python-only
spellings such as ``1_000``, ``nan`` and ``inf`` stay usable names.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

from rundown.logic.errors import ValidationError
from rundown.models.element_type import ElementType

_DECIMAL_LITERAL = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_PREFIXED_LITERAL = re.compile(r"0(?:[xX][0-9a-fA-F]+|[bB][01]+|[oO][0-7]+)")


def is_numeric_name(token: str) -> bool:
    return bool(_DECIMAL_LITERAL.fullmatch(token) or _PREFIXED_LITERAL.fullmatch(token))


def is_usable_name(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    token = value.strip()
    if not token or token in {"undefined", "null"}:
        return False
    return not is_numeric_name(token)


def require_name(value: Any, field: str = "name") -> str:
    if not is_usable_name(value):
        raise ValidationError(f"{field} is invalid", field=field, value=value)
    return str(value).strip()


def validate_element_template(template: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Check an element template carries a known ``type``; return a copy.

    Only the discriminator is checked; every other field is opaque.
    """
    if not isinstance(template, Mapping):
        raise ValidationError("template is required", field="template")
    element_type = template.get("type")
    if not element_type:
        raise ValidationError("template.type is required", field="template.type")
    if element_type not in ElementType.ALL:
        raise ValidationError(
            f"template.type must be one of {list(ElementType.ALL)}",
            field="template.type",
            value=element_type,
        )
    return dict(template)


__all__ = ["is_numeric_name", "is_usable_name", "require_name", "validate_element_template"]
