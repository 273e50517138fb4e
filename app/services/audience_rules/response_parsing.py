"""
Provider response parsing.

Text-generation vendors wrap their answer in different envelopes. The text is
pulled out by an ordered chain of extractors, each returning the text or None,
and the JSON rule payload is then located inside that text.
"""

import json
import logging
from typing import Any, Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], Optional[str]]


def _dig(data: Any, path: Sequence[Any]) -> Any:
    """Follow dict keys / list indices, returning None on any missing step."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[step] if isinstance(step, int) else current.get(step)
        if current is None:
            return None
    return current


def _first_text(data: Any, paths: Sequence[Sequence[Any]]) -> Optional[str]:
    for path in paths:
        value = _dig(data, path)
        if value:
            return str(value).strip()
    return None


def extract_gemini_text(data: Any) -> Optional[str]:
    """candidates[0] -> content/output -> parts[0].text, in its observed variants."""
    return _first_text(data, (
        ("candidates", 0, "content", "parts", 0, "text"),
        ("candidates", 0, "output", "parts", 0, "text"),
        ("candidates", 0, "content", 0, "content", "parts", 0, "text"),
        ("candidates", 0, "content", "content", "parts", 0, "text"),
        ("candidates", 0, "content", 0, "text"),
        ("candidates", 0, "parts", 0, "text"),
    ))


def extract_openai_text(data: Any) -> Optional[str]:
    return _first_text(data, (
        ("choices", 0, "text"),
        ("choices", 0, "message", "content"),
    ))


def extract_output_text(data: Any) -> Optional[str]:
    return _first_text(data, (("output", 0, "content", 0, "text"),))


def extract_results_text(data: Any) -> Optional[str]:
    return _first_text(data, (("results", 0, "output", "content", 0, "text"),))


def extract_generated_text(data: Any) -> Optional[str]:
    return _first_text(data, (("generatedText",), ("generated_text",)))


def extract_raw_string(data: Any) -> Optional[str]:
    if isinstance(data, str):
        return data.strip() or None
    return None


TEXT_EXTRACTORS: List[Extractor] = [
    extract_gemini_text,
    extract_openai_text,
    extract_output_text,
    extract_results_text,
    extract_generated_text,
    extract_raw_string,
]


def extract_provider_text(data: Any) -> Optional[str]:
    """Return the generated text from a provider response body, if any."""
    if not data:
        return None

    if isinstance(data, str):
        stripped = data.strip()
        if stripped.startswith(("{", "[")):
            try:
                data = json.loads(stripped)
            except ValueError:
                return stripped
        else:
            return stripped

    for extractor in TEXT_EXTRACTORS:
        text = extractor(data)
        if text:
            return text
    return None


def _try_json(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except ValueError:
        return None


def locate_json_payload(text: Optional[str]) -> Any:
    """
    Find the JSON payload inside generated text.

    Tries the outermost {...} block, then the outermost [...] block, then
    the whole trimmed string. Returns None when nothing parses.
    """
    if not text or not isinstance(text, str):
        return None

    for opening, closing in (("{", "}"), ("[", "]")):
        first = text.find(opening)
        last = text.rfind(closing)
        if first != -1 and last > first:
            parsed = _try_json(text[first:last + 1])
            if parsed is not None:
                return parsed

    parsed = _try_json(text.strip())
    if parsed is None:
        logger.debug("No JSON payload found in provider text (%d chars)", len(text))
    return parsed
