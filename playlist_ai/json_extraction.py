"""Recover a JSON object from free-form generated text

Each strategy is a pure function returning the parsed value or None when it
does not apply. ``extract_json`` tries them in order.
"""

import json
import re
from typing import Any, Callable, List, Optional

from errors import InvalidAIResponseError

_FENCE_RE = re.compile(r"```(?:[a-zA-Z0-9_-]+)?\s*\n?(.*?)```", re.DOTALL)


def _loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def parse_direct(text: str) -> Optional[Any]:
    """The whole reply is JSON"""
    return _loads(text.strip())


def parse_fenced_block(text: str) -> Optional[Any]:
    """JSON inside a ``` or ```json fenced block"""
    for match in _FENCE_RE.finditer(text):
        parsed = _loads(match.group(1).strip())
        if parsed is not None:
            return parsed
    return None


def parse_brace_span(text: str) -> Optional[Any]:
    """Substring from the first '{' to the last '}'"""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _loads(text[start:end + 1])


STRATEGIES: List[Callable[[str], Optional[Any]]] = [
    parse_direct,
    parse_fenced_block,
    parse_brace_span,
]


def extract_json(text: str) -> Any:
    """Parse generated text with each strategy in turn

    Raises:
        InvalidAIResponseError: If no strategy yields JSON
    """
    for strategy in STRATEGIES:
        parsed = strategy(text or "")
        if parsed is not None:
            return parsed
    raise InvalidAIResponseError("invalid AI response: no JSON found in the reply")
