# jewelry_api/core/sanitize.py
import re

_TAG_DELIMITERS_RE = re.compile(r"[<>]")
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+=", re.IGNORECASE)


def _strip_once(value: str) -> str:
    value = _TAG_DELIMITERS_RE.sub("", value)
    value = _JS_PROTOCOL_RE.sub("", value)
    return _EVENT_HANDLER_RE.sub("", value)


def sanitize_input(value: str) -> str:
    """
    Strip HTML tag delimiters, `javascript:` and inline `on*=` handlers.

    Passes repeat until nothing changes, so nested payloads such as
    `javajavascript:script:` cannot reassemble the text a pass removed.
    Templates must still escape on output.
    """
    while True:
        cleaned = _strip_once(value)
        if cleaned == value:
            return cleaned.strip()
        value = cleaned
