"""Field types and the base class for normalized output rows.

Upstream payloads are loose: money arrives as `12.5`, `"12.50"` or
`{"amount": "12.50", "code": "USD"}`; ids arrive as ints or strings; an
optional text field may hold a number. The annotated types below do the
coercion once, at model construction, so each normalizer just picks values.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict

_LOCALE_FORMATS = ("%m/%d/%Y %H:%M:%S", "%m/%d/%Y %H:%M", "%m/%d/%Y", "%b %d, %Y", "%B %d, %Y")


def to_amount(value: Any) -> float:
    """Plain number out of a bare value or an {amount|total|value} object; 0 when unusable."""
    if isinstance(value, dict):
        value = next(
            (value[k] for k in ("amount", "total", "value") if value.get(k) is not None), 0
        )
    if value is None or value == "" or isinstance(value, (dict, list)):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def as_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def as_scalar(value: Any) -> Any:
    """Keep CSV-friendly scalars as they are; serialize containers to JSON text."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return value


def as_list(value: Any) -> list[Any]:
    """Lists pass through; anything else (a string, an object, None) becomes empty."""
    return value if isinstance(value, list) else []


def parse_datetime(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _LOCALE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def format_date(value: Any, with_time: bool = False) -> str | None:
    """M/D/YYYY (optionally with HH:MM) as shown in the FreshBooks UI; None when unparseable."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    date_part = f"{parsed.month}/{parsed.day}/{parsed.year}"
    if not with_time:
        return date_part
    return f"{date_part} {parsed.hour:02d}:{parsed.minute:02d}"


Amount = Annotated[float, BeforeValidator(to_amount)]
Text = Annotated[str | None, BeforeValidator(as_text)]
Scalar = Annotated[Any, BeforeValidator(as_scalar)]
Items = Annotated[list[Any], BeforeValidator(as_list)]


class NormalizedRecord(BaseModel):
    """One flat output row. Every field is declared, so every row has every column."""

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def columns(cls) -> list[str]:
        return list(cls.model_fields)
