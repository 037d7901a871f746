# helpers.py
import json
from datetime import datetime, timezone
from typing import Any


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _strip_fences(content: str) -> str:
    # Some models wrap JSON in markdown fences like ```json ... ```
    cleaned = (content or "").strip()
    if cleaned.startswith("```"):
        cleaned = "\n".join(cleaned.splitlines()[1:])
    if cleaned.endswith("```"):
        cleaned = "\n".join(cleaned.splitlines()[:-1])
    return cleaned.strip()


def _load_json_object(text: str) -> Any:
    """Parse text as JSON, retrying once with trailing commentary cut after the last brace."""
    try:
        return json.loads(text)
    except ValueError:
        last_brace = text.rfind("}")
        if last_brace == -1:
            raise
        return json.loads(text[: last_brace + 1])
