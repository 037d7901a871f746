from dataclasses import dataclass
from typing import Any, Dict, Optional

from jobassist.errors import MissingParameter


@dataclass
class AnalysisRequest:
    resume: Any
    job_description: str


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (dict, list)):
        return bool(value)
    return True


def validate_analysis_request(body: Optional[Dict[str, Any]]) -> AnalysisRequest:
    """Check that ``resume`` and ``jobDescription`` are both present and non-empty.

    Raises MissingParameter naming the first missing field.
    """
    data = body if isinstance(body, dict) else {}
    resume = data.get("resume")
    job_description = data.get("jobDescription")

    if not _present(resume):
        raise MissingParameter("resume")
    if not _present(job_description):
        raise MissingParameter("jobDescription")
    if not isinstance(job_description, str):
        job_description = str(job_description)
    return AnalysisRequest(resume=resume, job_description=job_description)


def validate_resume_text(body: Optional[Dict[str, Any]]) -> str:
    data = body if isinstance(body, dict) else {}
    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        raise MissingParameter("text", "Invalid or empty resume text provided")
    return text
