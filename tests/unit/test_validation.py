"""Unit tests for request validation."""

import pytest

from jobassist.errors import MissingParameter
from jobassist.validation import validate_analysis_request, validate_resume_text


@pytest.mark.unit
def test_valid_request():
    req = validate_analysis_request({"resume": {"skills": ["Go"]}, "jobDescription": "Backend engineer"})
    assert req.resume == {"skills": ["Go"]}
    assert req.job_description == "Backend engineer"


@pytest.mark.unit
@pytest.mark.parametrize(
    "body, field",
    [
        (None, "resume"),
        ({}, "resume"),
        ({"jobDescription": "x"}, "resume"),
        ({"resume": {}, "jobDescription": "x"}, "resume"),
        ({"resume": "  ", "jobDescription": "x"}, "resume"),
        ({"resume": {"a": 1}}, "jobDescription"),
        ({"resume": {"a": 1}, "jobDescription": ""}, "jobDescription"),
        ({"resume": {"a": 1}, "jobDescription": "   \n"}, "jobDescription"),
        ({"resume": {"a": 1}, "jobDescription": None}, "jobDescription"),
    ],
)
def test_missing_fields_name_the_first_one(body, field):
    with pytest.raises(MissingParameter) as excinfo:
        validate_analysis_request(body)
    assert excinfo.value.field == field
    assert excinfo.value.message == "Missing required parameters"
    assert excinfo.value.kind == "MissingParameter"


@pytest.mark.unit
def test_non_dict_body_is_treated_as_empty():
    with pytest.raises(MissingParameter) as excinfo:
        validate_analysis_request(["resume", "jobDescription"])
    assert excinfo.value.field == "resume"


@pytest.mark.unit
def test_resume_text_must_be_a_non_blank_string():
    assert validate_resume_text({"text": "Jane Doe\nPython"}) == "Jane Doe\nPython"
    for body in (None, {}, {"text": ""}, {"text": "  "}, {"text": 42}):
        with pytest.raises(MissingParameter):
            validate_resume_text(body)
