# app.py
from __future__ import annotations
import os
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_talisman import Talisman
from werkzeug.exceptions import HTTPException

from jobassist.config import FunctionSettings, select_config
from jobassist.errors import RequestRejected
from jobassist.handlers import (
    AnalysisHandler,
    CoverLetterHandler,
    JobMatchHandler,
    OptimizeResumeHandler,
    ParseResumeHandler,
)
from jobassist.llm_client import LLMClient
from jobassist.responses import error_response, preflight_response

FUNCTIONS_PREFIX = "/functions/v1"
HANDLER_CLASSES = (JobMatchHandler, CoverLetterHandler, OptimizeResumeHandler, ParseResumeHandler)


def build_handlers(
    llm: LLMClient,
    settings: FunctionSettings,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, AnalysisHandler]:
    return {cls.name: cls(llm, settings, sleep=sleep) for cls in HANDLER_CLASSES}


def create_app(
    settings: Optional[FunctionSettings] = None,
    llm_client: Optional[LLMClient] = None,
    config=None,
    sleep: Callable[[float], None] = time.sleep,
) -> Flask:
    """Build the Flask app serving the analysis functions.

    ``settings`` defaults to the process environment; tests pass their own
    settings, a fake LLM client and a non-sleeping ``sleep``.
    """
    if settings is None:
        settings = FunctionSettings.from_env()
    if llm_client is None:
        llm_client = LLMClient(settings)
        # build the SDK client once, before worker threads share it
        if settings.llm_configured:
            llm_client.get_client()

    app = Flask(__name__)
    app.config.from_object(config or select_config())
    app.url_map.strict_slashes = False
    app.extensions["function_settings"] = settings
    app.extensions["llm_client"] = llm_client

    # function responses carry their own CORS headers; this covers the rest
    CORS(
        app,
        resources={r"/*": {"origins": settings.cors_origins or "*"}},
        supports_credentials=False,
        allow_headers=["Authorization", "Content-Type", "apikey", "x-client-info"],
        methods=["GET", "POST", "OPTIONS"],
    )

    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[settings.rate_limit],
        storage_uri=app.config.get("RATELIMIT_STORAGE_URI", "memory://"),
    )

    # preflights never count against the limit
    @limiter.request_filter
    def _preflight_exempt():
        return request.method == "OPTIONS"

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return error_response(RequestRejected.from_http(e))

    is_prod = not (app.config.get("DEBUG", False) or app.config.get("TESTING", False))
    Talisman(
        app,
        force_https=is_prod,
        content_security_policy={"default-src": ["'none'"], "frame-ancestors": ["'none'"]},
        session_cookie_secure=is_prod,
        frame_options="DENY",
        referrer_policy="strict-origin-when-cross-origin",
    )

    handlers = build_handlers(llm_client, settings, sleep=sleep)
    app.extensions["analysis_handlers"] = handlers

    @app.before_request
    def _cors_preflight_shortcircuit():
        if request.method == "OPTIONS" and request.path.startswith(FUNCTIONS_PREFIX + "/"):
            return preflight_response()

    def _register(name: str, handler: AnalysisHandler):
        def view():
            return handler.handle(request)

        app.add_url_rule(
            f"{FUNCTIONS_PREFIX}/{name}",
            endpoint=name.replace("-", "_"),
            view_func=view,
            methods=["POST", "OPTIONS"],
        )

    for name, handler in handlers.items():
        _register(name, handler)

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "model": settings.model, "llm_configured": llm_client.configured})

    return app


def main():
    # Load env BEFORE building settings
    load_dotenv(Path.cwd() / ".env")
    app = create_app()
    print(f"[app] serving functions under {FUNCTIONS_PREFIX}")
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8000")), debug=app.config.get("DEBUG", False))


if __name__ == "__main__":
    main()
