from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

# Issues are relayed exactly as the model produced them.
Issue = Dict[str, Any]

# Placeholder for a field the caller did not send.
MISSING = "undefined"


def _as_text(value: Any) -> str:
    """Render a cell value the way the spreadsheet displays it."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _field_text(payload: Mapping[str, Any], key: str) -> str:
    if key not in payload:
        return MISSING
    return _as_text(payload[key])


@dataclass(frozen=True, slots=True)
class CellInput:
    """Single spreadsheet cell sent by the add-on for analysis."""

    address: str  # A1-style coordinate, e.g. "B3"
    value: str
    header: Optional[str] = None
    was_formula: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> "CellInput":
        # Non-object entries have no fields.
        if not isinstance(payload, Mapping):
            payload = {}

        header = payload.get("header")
        return cls(
            address=_field_text(payload, "address"),
            value=_field_text(payload, "value"),
            header=_as_text(header) if header else None,
            was_formula=bool(payload.get("wasFormula")),
        )


def parse_cells(items: List[Any]) -> List[CellInput]:
    return [CellInput.from_payload(item) for item in items]
