# dish_carbon/parsers.py - defensive readers for chat-completion replies
import json, re
from typing import Any, Callable, Iterable, List, Optional

from .errors import ResponseParseError

# last-resort guess when the model output can't be read
FALLBACK_INGREDIENTS = ["rice"]

# first [...] block, may span lines
ARRAY_RE = re.compile(r"\[.*?\]", re.DOTALL)

_MISSING = object()


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return _MISSING


def parse_envelope(raw: str) -> dict:
    """Decode the provider reply. Anything but a JSON object is a parse error."""
    data = _load_json(raw)
    if not isinstance(data, dict):
        raise ResponseParseError("provider reply is not a JSON object")
    return data


def message_content(envelope: dict) -> Optional[str]:
    """choices[0].message.content, or None when the path is missing."""
    try:
        content = envelope["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if content is None:
        return None
    return content if isinstance(content, str) else json.dumps(content)


def _string_array(text: Optional[str]) -> Optional[List[str]]:
    if text is None:
        return None
    data = _load_json(text)
    if not isinstance(data, list) or not data:
        return None
    if not all(isinstance(x, str) for x in data):
        return None
    return data


def _embedded_array(text: Optional[str]) -> Optional[List[str]]:
    if text is None:
        return None
    m = ARRAY_RE.search(text)
    return _string_array(m.group()) if m else None


def _first(attempts: Iterable[Callable[[], Optional[List[str]]]]) -> Optional[List[str]]:
    for attempt in attempts:
        found = attempt()
        if found:
            return found
    return None


def extract_ingredient_list(raw: str) -> List[str]:
    """
    Pull a list of ingredient strings out of a chat-completion reply.
    Tries, in order: content as a JSON array, the first [...] block in the
    content (or in the raw reply when there is no content), then ["rice"].
    Raises ResponseParseError only when the reply itself isn't JSON.
    """
    content = message_content(parse_envelope(raw))
    search_text = raw if content is None else content
    found = _first([
        lambda: _string_array(content),
        lambda: _embedded_array(search_text),
    ])
    return found if found else list(FALLBACK_INGREDIENTS)


def extract_dish_name(raw: str) -> str:
    """Trimmed content of the reply; "" when there is none."""
    content = message_content(parse_envelope(raw))
    return (content or "").strip()
