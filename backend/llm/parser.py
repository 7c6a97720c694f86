"""
Parsing helpers for free-text model responses.

Models are asked to return bare JSON but sometimes wrap it in prose or
markdown fences, so the parser extracts the first {...} (or [...]) span and
falls back to a caller-provided default when nothing usable is found.
"""

import json
import re
from typing import Any, List, Optional, TypeVar

from backend.core.logging import get_component_logger


T = TypeVar('T')

_JSON_OBJECT_RE = re.compile(r'\{[\s\S]*\}')
_JSON_ARRAY_RE = re.compile(r'\[[\s\S]*\]')
_BULLET_RE = re.compile(r'^\s*(?:[-•*]|\d+[.)])\s+(.*\S)\s*$')


class ResponseParser:
    """Extract structured values from model output."""

    def __init__(self, logger=None):
        self.logger = logger or get_component_logger('ResponseParser')

    def parse_json_response(self, text: str, fallback: T) -> Any:
        """
        Parse the first JSON object in the text.

        Returns the fallback when there is no object or it is invalid JSON.
        """
        match = _JSON_OBJECT_RE.search(text or '')
        if not match:
            self.logger.warning("No JSON object found in model response")
            return fallback
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            self.logger.warning("Model response contained invalid JSON", exc_info=True)
            return fallback
        if not isinstance(parsed, dict):
            return fallback
        return parsed

    def parse_array_response(self, text: str, fallback: List[str]) -> List[str]:
        """
        Parse a list of strings.

        Tries the first JSON array, then bullet / numbered lines, then the
        fallback.
        """
        match = _JSON_ARRAY_RE.search(text or '')
        if match:
            try:
                parsed = json.loads(match.group(0))
                if isinstance(parsed, list):
                    return [str(item) for item in parsed]
            except json.JSONDecodeError:
                self.logger.debug("Array span was not valid JSON, trying bullet lines")

        bullets = [m.group(1) for m in map(_BULLET_RE.match, (text or '').splitlines()) if m]
        if bullets:
            return bullets
        return fallback

    @staticmethod
    def extract_value(text: str, pattern: str, fallback: Optional[str] = None) -> Optional[str]:
        """First capture group of pattern in text, stripped; fallback if absent."""
        match = re.search(pattern, text or '')
        if not match:
            return fallback
        value = match.group(1) if match.groups() else match.group(0)
        return value.strip()


def coerce_string_list(value: Any, fallback: List[str]) -> List[str]:
    """
    Turn a parsed JSON value into a list of non-blank strings.

    A scalar becomes a one-element list; empty results use the fallback.
    """
    if value is None:
        return list(fallback)
    items = value if isinstance(value, list) else [value]
    result = [str(item).strip() for item in items if item is not None and str(item).strip()]
    return result or list(fallback)


def coerce_text(value: Any, fallback: str) -> str:
    """Turn a parsed JSON value into a non-blank string, or the fallback."""
    if isinstance(value, list):
        value = ' '.join(str(item) for item in value if item is not None)
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback
