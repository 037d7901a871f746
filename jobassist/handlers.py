"""
Request handlers for the analysis functions.

Each handler runs one request through the same stages: preflight
short-circuit, body validation, the LLM call under the retry controller, and
the response envelope. Subclasses only choose the prompt and how the LLM text
becomes the result payload.
"""

from __future__ import annotations
import json
import time
from typing import Any, Callable, Dict, List, Optional

from flask import Response
from werkzeug.exceptions import HTTPException

from jobassist.config import FunctionSettings
from jobassist.errors import AnalysisError, UnexpectedResponseShape, UpstreamCallFailure
from jobassist.helpers import _load_json_object, _strip_fences
from jobassist.llm_client import JSON_OBJECT, LLMClient
from jobassist.responses import error_response, preflight_response, success_response
from jobassist.retry import retry_with_backoff
from jobassist.validation import AnalysisRequest, validate_analysis_request, validate_resume_text


class AnalysisHandler:
    name = "analysis"
    system_prompt = ""
    response_format: Optional[str] = None
    failure_message = "Request failed"

    def __init__(
        self,
        llm: LLMClient,
        settings: FunctionSettings,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.llm = llm
        self.settings = settings
        self.sleep = sleep
        self.clock = clock

    def handle(self, request) -> Response:
        if request.method == "OPTIONS":
            return preflight_response()
        try:
            body = request.get_json(silent=True)
            return success_response(self.run(body))
        except AnalysisError as e:
            print(f"[{self.name}] {e.kind}: {e}")
            return error_response(e, self.failure_message)
        except HTTPException:
            # web-layer rejections keep their status; the app error handler formats them
            raise
        except Exception as e:
            print(f"[{self.name}] unexpected error: {e!r}")
            return error_response(e, self.failure_message)

    def run(self, body: Optional[Dict[str, Any]]) -> Any:
        analysis = validate_analysis_request(body)
        content = self.call_llm(self.build_user_prompt(analysis))
        return self.publish(content)

    def build_user_prompt(self, analysis: AnalysisRequest) -> str:
        return f"Resume: {json.dumps(analysis.resume)}\n\nJob Description: {analysis.job_description}"

    def publish(self, content: str) -> Any:
        return content

    def call_llm(self, user_prompt: str, deadline: Optional[float] = None) -> str:
        # configuration problems must not cost a retry attempt
        self.llm.ensure_configured()
        if deadline is None:
            deadline = self.clock() + self.settings.request_timeout
        try:
            return retry_with_backoff(
                lambda: self.llm.complete(
                    self.system_prompt,
                    user_prompt,
                    self.response_format,
                    timeout=max(deadline - self.clock(), 0.0),
                ),
                max_retries=self.settings.max_retries,
                base_delay=self.settings.backoff_base,
                deadline=deadline,
                sleep=self.sleep,
                clock=self.clock,
                on_retry=self._log_retry,
            )
        except AnalysisError:
            raise
        except Exception as e:
            raise UpstreamCallFailure(str(e) or self.failure_message, cause=e) from e

    def _log_retry(self, attempt: int, delay: float, error: BaseException) -> None:
        print(
            f"[{self.name}] attempt {attempt + 1}/{self.settings.max_retries} failed ({error}), "
            f"retrying in {delay:.1f}s"
        )


class JobMatchHandler(AnalysisHandler):
    name = "calculate-job-match"
    response_format = JSON_OBJECT
    failure_message = "Failed to calculate job match"
    system_prompt = (
        "Analyze the match between a resume and job description. "
        "Return a JSON object with a match score (0-100) and reasons for the score. "
        "Use exactly this schema: {\"score\": number, \"reasons\": string[]}. "
        "Return ONLY the JSON object, nothing else."
    )

    def publish(self, content: str) -> str:
        cleaned = _strip_fences(content)
        try:
            data = json.loads(cleaned)
        except ValueError:
            raise UnexpectedResponseShape("Job match response is not valid JSON", content=content)
        if not isinstance(data, dict):
            raise UnexpectedResponseShape("Job match response is not a JSON object", content=content)
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 100:
            raise UnexpectedResponseShape("Job match response has no score between 0 and 100", content=content)
        return cleaned


class CoverLetterHandler(AnalysisHandler):
    name = "generate-cover-letter"
    failure_message = "Failed to generate cover letter"
    system_prompt = "Generate a professional cover letter based on the resume and job description."

    def publish(self, content: str) -> Dict[str, str]:
        return {"coverLetter": content}


class OptimizeResumeHandler(AnalysisHandler):
    name = "optimize-resume"
    failure_message = "Failed to optimize resume"
    system_prompt = "Optimize and tailor the resume content for the specific job description."

    def publish(self, content: str) -> Dict[str, str]:
        return {"optimizedResume": content}


def chunk_text(text: str, size: int) -> List[str]:
    return [text[i : i + size] for i in range(0, len(text), size)] or [text]


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def merge_parsed_chunks(parts: List[Dict[str, Any]]) -> Dict[str, List[Any]]:
    """Merge per-chunk results: skills de-duplicated in first-seen order, the rest concatenated."""
    merged: Dict[str, List[Any]] = {"skills": [], "experience": [], "education": []}
    seen = set()
    for part in parts:
        for skill in _as_list(part.get("skills")):
            key = json.dumps(skill, sort_keys=True) if not isinstance(skill, str) else skill
            if key not in seen:
                seen.add(key)
                merged["skills"].append(skill)
        merged["experience"].extend(_as_list(part.get("experience")))
        merged["education"].extend(_as_list(part.get("education")))
    return merged


class ParseResumeHandler(AnalysisHandler):
    name = "parse-resume"
    response_format = JSON_OBJECT
    failure_message = "Failed to parse resume"
    system_prompt = (
        "Parse the resume text into structured data. Return valid JSON with skills (array of strings), "
        "experience (array of objects with title, company, duration, description), "
        "and education (array of objects with degree, school, year)."
    )

    def run(self, body: Optional[Dict[str, Any]]) -> Dict[str, List[Any]]:
        text = validate_resume_text(body)
        chunks = chunk_text(text, self.settings.parse_chunk_size)
        # one deadline for the whole request, however many chunks it takes
        deadline = self.clock() + self.settings.request_timeout
        parts = []
        for index, chunk in enumerate(chunks):
            content = self.call_llm(chunk, deadline=deadline)
            parts.append(self._parse_chunk(content, index))
        return merge_parsed_chunks(parts)

    def _parse_chunk(self, content: str, index: int) -> Dict[str, Any]:
        try:
            data = _load_json_object(_strip_fences(content))
        except ValueError:
            raise UnexpectedResponseShape(f"Chunk {index + 1} response is not valid JSON", content=content)
        if not isinstance(data, dict):
            raise UnexpectedResponseShape(f"Chunk {index + 1} response is not a JSON object", content=content)
        return data
