"""Turn a model's free-text reply into an AnalysisReport.

The reply is expected to end with a fenced JSON block, but models drift: the
block may be untagged, unfenced, carry trailing commas, or be missing
entirely. Extraction is an ordered cascade of pure ``text -> partial``
functions; the first one that yields a partial wins and is merged over the
default report. Nothing here raises on bad input.
"""

import json
import logging
import re
from typing import Any, Callable

from ..models.analysis import AnalysisReport, NARRATIVE_FIELDS, SCORE_FIELDS


logger = logging.getLogger(__name__)

Partial = dict[str, Any]

JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")
TRAILING_COMMA_OBJECT = re.compile(r",\s*}")
TRAILING_COMMA_ARRAY = re.compile(r",\s*]")

# Heuristic aliases: the model sometimes names the score after the narrative key
SCORE_ALIASES = {
    "heaviness": ("heaviness", "weight"),
    "softness": ("softness", "touch"),
}


def find_balanced_braces(text: str) -> str | None:
    """Return the first balanced ``{...}`` region, ignoring braces in strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from here; try the next opening brace
        start = text.find("{", start + 1)
    return None


def find_structured_block(text: str) -> str | None:
    """Locate the candidate JSON region: ```json fence, any fence, then braces."""
    for pattern in (JSON_FENCE, ANY_FENCE):
        match = pattern.search(text)
        if match:
            return match.group(1)
    return find_balanced_braces(text)


def strip_trailing_commas(text: str) -> str:
    text = TRAILING_COMMA_OBJECT.sub("}", text)
    return TRAILING_COMMA_ARRAY.sub("]", text)


def coerce_score(value: Any) -> int | None:
    """Integers pass, integral floats and digit strings are coerced, the rest dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


def coerce_text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _validated(data: dict[str, Any]) -> Partial:
    """Keep only recognized fields whose values survive coercion."""
    partial: Partial = {}
    for name in NARRATIVE_FIELDS:
        text = coerce_text(data.get(name))
        if text is not None:
            partial[name] = text

    raw_scores = data.get("scores")
    scores: dict[str, int] = {}
    if isinstance(raw_scores, dict):
        for name in SCORE_FIELDS:
            score = coerce_score(raw_scores.get(name))
            if score is not None:
                scores[name] = score
    partial["scores"] = scores
    return partial


def extract_structured_block(text: str) -> Partial | None:
    """Stage one: parse the fenced (or brace-delimited) JSON block."""
    block = find_structured_block(text)
    if block is None:
        return None

    try:
        parsed = json.loads(strip_trailing_commas(block))
    except json.JSONDecodeError as e:
        logger.warning("JSON parse failed, falling back to heuristic extraction: %s", e)
        return None

    if not isinstance(parsed, dict):
        logger.warning("Structured block is a %s, not an object", type(parsed).__name__)
        return None
    return _validated(parsed)


def _search_score(text: str, key: str) -> int | None:
    pattern = rf"[\"']?{re.escape(key)}[\"']?\s*:\s*[\"']?(\d+)"
    match = re.search(pattern, text, re.IGNORECASE)
    return int(match.group(1)) if match else None


def _search_text(text: str, key: str) -> str | None:
    pattern = rf"[\"']?{re.escape(key)}[\"']?\s*:\s*[\"']([^\"']+)[\"']"
    match = re.search(pattern, text, re.IGNORECASE)
    return match.group(1) if match else None


def extract_key_values(text: str) -> Partial | None:
    """Stage two: pick ``key: value`` pairs out of loose text, one field at a time."""
    if not text:
        return None

    scores: dict[str, int] = {}
    for name in SCORE_FIELDS:
        for key in SCORE_ALIASES.get(name, (name,)):
            score = _search_score(text, key)
            if score is not None:
                scores[name] = score
                break

    partial: Partial = {"scores": scores}
    for name in NARRATIVE_FIELDS:
        value = _search_text(text, name)
        if value:
            partial[name] = value
    return partial


EXTRACTORS: tuple[Callable[[str], Partial | None], ...] = (
    extract_structured_block,
    extract_key_values,
)


def parse_analysis(raw_text: str) -> AnalysisReport:
    """Run the extraction cascade and merge the winner over the defaults."""
    report = AnalysisReport.default(raw_text)
    for extractor in EXTRACTORS:
        partial = extractor(raw_text)
        if partial is not None:
            logger.debug("Analysis extracted by %s", extractor.__name__)
            return report.merge(partial)
    return report
