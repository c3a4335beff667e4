import logging
from typing import Any, Dict, Mapping

from .context import build_job_context
from .errors import AnalysisError

LOGGER = logging.getLogger(__name__)


def error_feedback(exc: AnalysisError) -> Dict[str, Any]:
    """Feedback payload stored on a resume whose analysis failed."""
    return {
        "error": str(exc) or exc.__class__.__name__,
        "errorType": exc.error_type,
        "retryable": True,
    }


class ResumePipeline:
    """Create-then-analyze-then-update flow for one resume submission.

    The base record is written before the model is called, and exactly one
    more write follows: either the analysis fields (status ``processed``) or
    an error payload with null scores (status ``error``).
    """

    def __init__(self, analyzer, store, job_lookup=None):
        self.analyzer = analyzer
        self.store = store
        self.job_lookup = job_lookup or store

    def process_submission(self, fields: Mapping[str, Any]):
        resume = self.store.create_resume(dict(fields))
        LOGGER.info("Resume %s created for %s, starting analysis", resume.id, resume.email)

        job_context = build_job_context(resume, self.job_lookup)
        try:
            result = self.analyzer.analyze(resume.resume_text, job_context)
        except AnalysisError as exc:
            LOGGER.warning("Analysis of resume %s failed (%s): %s", resume.id, exc.error_type, exc)
            return self.store.mark_analysis_failed(resume.id, error_feedback(exc))

        LOGGER.info("Resume %s analyzed: score=%s match=%s", resume.id, result.score, result.match_score)
        return self.store.update_resume_analysis(resume.id, result)
