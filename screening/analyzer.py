"""Resume analysis against a job context through an external language model."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .prompts import SCHEMAS, SYSTEM_PROMPT, build_user_prompt
from .scorer import clamp_score, parse_payload, validate_payload

LOGGER = logging.getLogger(__name__)

ANALYSIS_MODES = tuple(SCHEMAS)


@dataclass
class AnalysisFeedback:
    strengths: List[str]
    weaknesses: List[str]
    skills_identified: List[str]
    recommendation: str
    analysis_mode: str = "enhanced"

    def to_json(self) -> Dict[str, Any]:
        return {
            "analysisMode": self.analysis_mode,
            "strengths": self.strengths,
            "weaknesses": self.weaknesses,
            "skillsIdentified": self.skills_identified,
            "recommendation": self.recommendation,
        }


@dataclass
class AnalysisResult:
    """Validated, bounded output of one analysis call."""

    score: int
    match_score: int
    feedback: AnalysisFeedback
    suggested_questions: List[str] = field(default_factory=list)
    experience: List[Dict[str, Any]] = field(default_factory=list)
    education: List[Dict[str, Any]] = field(default_factory=list)


class ResumeAnalyzer:
    """Scores a resume for a job context with a single model call.

    ``client`` is anything with ``complete(system_prompt, user_prompt) -> str``.
    ``mode`` selects the prompt and the required-field checklist:

    - ``enhanced`` asks for scores, feedback, suggested questions, experience
      and education, and requires all of them.
    - ``basic`` asks for scores and feedback only. Suggested questions,
      experience and education are never requested, so they come back as
      empty lists; ``feedback.analysisMode`` records which mode produced a
      result, so an empty education list from ``basic`` means "not asked".

    Raises ``MalformedResponse`` when the reply is not a JSON object and
    ``InvalidResponseShape`` when required fields are missing or mistyped.
    Transport failures surface as ``LLMServiceError`` from the client.
    """

    def __init__(self, client, mode: str = "enhanced"):
        if mode not in ANALYSIS_MODES:
            raise ValueError(f"Unknown analysis mode: {mode}")
        self.client = client
        self.mode = mode

    def analyze(self, resume_text: str, job_context: str) -> AnalysisResult:
        prompt = build_user_prompt(resume_text, job_context, self.mode)
        LOGGER.info("Requesting %s resume analysis (%s chars of resume)", self.mode, len(resume_text))
        raw = self.client.complete(SYSTEM_PROMPT, prompt)

        payload = parse_payload(raw)
        validate_payload(payload, self.mode)

        feedback = payload["feedback"]
        result = AnalysisResult(
            score=clamp_score(payload["score"]),
            match_score=clamp_score(payload["matchScore"]),
            feedback=AnalysisFeedback(
                strengths=list(feedback["strengths"]),
                weaknesses=list(feedback["weaknesses"]),
                skills_identified=list(feedback["skillsIdentified"]),
                recommendation=feedback["recommendation"],
                analysis_mode=self.mode,
            ),
        )
        if self.mode == "enhanced":
            result.suggested_questions = list(payload["suggestedQuestions"])
            result.experience = list(payload["experience"])
            result.education = list(payload["education"])
        return result
