from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, List, Sequence

from .config import AnalysisConfig
from .llm_client import LLMClient
from .models import CellInput, Issue
from .prompt_builder import build_analysis_messages

LOGGER = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```json\n?|\n?```")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def strip_code_fence(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_issues(content: str) -> List[Any]:
    """Parse the model output into a list of issues.

    Output that is not valid JSON yields an empty list instead of an error.
    NaN, Infinity and numbers that overflow a float count as invalid.
    """

    json_text = strip_code_fence(content)
    try:
        payload = json.loads(
            json_text,
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
    except ValueError as exc:
        LOGGER.error("Parse error: %s", exc)
        LOGGER.error("AI response was: %s", content)
        return []

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("issues"), list):
        return payload["issues"]

    LOGGER.error("AI response is not a JSON array: %s", content)
    return []


def _is_confident(issue: Any, threshold: float) -> bool:
    if not isinstance(issue, dict):
        return True

    confidence = issue.get("confidence")
    if confidence is None:
        return True
    try:
        return float(confidence) > threshold
    except (TypeError, ValueError):
        return False


def filter_confident_issues(issues: Sequence[Any], threshold: float = 0.7) -> List[Issue]:
    """Keep issues without a confidence or with one above ``threshold``."""

    return [issue for issue in issues if _is_confident(issue, threshold)]


async def analyze_cells(
    cells: Sequence[CellInput],
    config: AnalysisConfig,
    llm_client: LLMClient,
) -> List[Issue]:
    messages = build_analysis_messages(cells, config.max_cells)
    content = await llm_client.complete(messages)
    LOGGER.debug("AI response: %s", content)

    issues = parse_issues(content)
    filtered = filter_confident_issues(issues, config.confidence_threshold)
    LOGGER.info("Issues found: %d", len(filtered))
    return filtered
