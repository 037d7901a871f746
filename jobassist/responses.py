# responses.py
import json
from typing import Any, Dict, Optional

from flask import Response

from jobassist.errors import AnalysisError
from jobassist.helpers import _iso_now

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def preflight_response() -> Response:
    return Response("ok", status=200, headers=CORS_HEADERS)


def success_response(payload: Any) -> Response:
    """Wrap a handler result; text is forwarded as-is, anything else is JSON-encoded."""
    body = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return Response(body, status=200, headers=CORS_HEADERS, mimetype="application/json")


def error_body(error: BaseException, fallback: str = "Request failed") -> Dict[str, Any]:
    if isinstance(error, AnalysisError):
        message, kind = error.message, error.kind
    else:
        message, kind = (str(error) or fallback), "InternalError"
    return {
        "error": message,
        "kind": kind,
        "details": f"{error.__class__.__name__}: {error}",
        "timestamp": _iso_now(),
    }


def error_response(error: BaseException, fallback: str = "Request failed", status: Optional[int] = None) -> Response:
    if status is None:
        status = error.status if isinstance(error, AnalysisError) else 400
    body = json.dumps(error_body(error, fallback), ensure_ascii=False)
    return Response(body, status=status, headers=CORS_HEADERS, mimetype="application/json")
