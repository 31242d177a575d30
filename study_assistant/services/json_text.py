import json
import logging
import re
from typing import Any

logger = logging.getLogger("study_assistant")

FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)

def strip_code_fences(text: str) -> str:
    t = (text or "").strip()
    match = FENCE_RE.match(t)
    if match and match.group(2):
        t = match.group(2).strip()
    return t

def parse_json_from_text(text: str) -> Any | None:
    """Parse model output as JSON, tolerating a ```json fenced wrapper.

    Returns None when the remainder is not valid JSON; callers decide how
    to report that.
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except ValueError:
        logger.error({"event": "json_parse_failed", "preview": (text or "")[:500]})
        return None
