from __future__ import annotations

from textwrap import dedent
from typing import List, Sequence

from .models import CellInput

FORMULA_HINT = " [extracted from broken formula]"

PROMPT_HEADER = "Analyze this Google Sheets data. Format: address [column]: value"

SYSTEM_PROMPT = dedent(
    """
    You are a data cleaning expert for spreadsheets. Find ALL issues and suggest fixes.

    STRICT RULES - must follow every time:
    1. ALWAYS fix phone numbers to format 8(XXX)XXX-XX-XX for Russian numbers, or standard local format for others
    2. ALWAYS trim extra spaces (leading, trailing, double spaces inside)
    3. ALWAYS fix name capitalization → "John Smith" (not "john smith" or "JOHN SMITH")
    4. ALWAYS lowercase emails → ivan@mail.ru (not IVAN@MAIL.RU)
    5. ALWAYS normalize dates → DD.MM.YYYY
    6. Use the column header as a hint about the data type
    7. Cells marked [extracted from broken formula] — treat as regular data and fix normally
    8. DO NOT skip obvious issues — check every single cell

    Return ONLY a valid JSON array, no text before or after, no markdown:
    [{"row":3,"col":2,"type":"Phone format","oldValue":"+7999123","newValue":"8(999)123-45-67","confidence":0.98}]

    If no issues found, return [].
    """
).strip()


def format_cell_line(cell: CellInput) -> str:
    header_hint = f" [{cell.header}]" if cell.header else ""
    formula_hint = FORMULA_HINT if cell.was_formula else ""
    return f'{cell.address}{header_hint}{formula_hint}: "{cell.value}"'


def build_user_prompt(cells: Sequence[CellInput], max_cells: int = 200) -> str:
    """Describe the first ``max_cells`` cells, one line each.

    When cells are dropped a closing note tells the model how many of the
    total it is looking at.
    """

    limited = cells[:max_cells]
    prompt = PROMPT_HEADER + "\n\n"
    prompt += "".join(format_cell_line(cell) + "\n" for cell in limited)

    if len(cells) > max_cells:
        prompt += f"\n(Showing first {max_cells} of {len(cells)} cells)"

    return prompt


def build_analysis_messages(
    cells: Sequence[CellInput],
    max_cells: int = 200,
) -> List[dict]:
    """Compose the system and user messages for the cleaning request."""

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(cells, max_cells)},
    ]
