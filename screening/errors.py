"""Errors raised while analyzing a resume."""
from typing import List


class AnalysisError(Exception):
    """Base class for every failure inside the analysis step."""

    error_type = "analysis_failed"


class LLMServiceError(AnalysisError):
    """The text-generation call itself failed (network, HTTP status, timeout, config)."""

    error_type = "service_error"


class MalformedResponse(AnalysisError):
    """The model's reply could not be parsed as a JSON object."""

    error_type = "malformed_response"


class InvalidResponseShape(AnalysisError):
    """The reply parsed, but required fields are missing or have the wrong type."""

    error_type = "invalid_response_shape"

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid response structure: " + "; ".join(self.problems))
