"""
Shared fixtures: a scripted stand-in for the Groq client and an API client
backed by a throwaway SQLite file.
"""
import copy
import json

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings

RESUME_TEXT = (
    "Jane Doe. Senior backend engineer with 7 years of Python, FastAPI and "
    "PostgreSQL experience at Acme Corp. BSc Computer Science, MIT, 2016."
)

ANALYSIS = {
    "score": 82,
    "matchScore": 76,
    "feedback": {
        "strengths": ["Deep Python experience", "Owns services end to end"],
        "weaknesses": ["No Kubernetes exposure"],
        "skillsIdentified": ["Python", "FastAPI", "PostgreSQL"],
        "recommendation": "Strong candidate, move to technical interview.",
    },
    "suggestedQuestions": ["How did you scale the Acme ingestion API?"],
    "experience": [{"title": "Senior Backend Engineer", "company": "Acme Corp", "years": 7}],
    "education": [{"degree": "BSc Computer Science", "institution": "MIT", "year": 2016}],
}


class FakeLLMClient:
    """Returns queued replies in order; dicts are JSON-encoded, exceptions are raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return json.dumps(reply)
        return reply


@pytest.fixture
def analysis():
    return copy.deepcopy(ANALYSIS)


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def settings(tmp_path):
    return Settings(base_dir=str(tmp_path), database_url=f"sqlite:///{tmp_path / 'test.db'}")


@pytest.fixture
def client(settings, fake_llm):
    app = create_app(settings, llm_client=fake_llm)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def resume_body():
    return {
        "candidateName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "resumeText": RESUME_TEXT,
        "position": "Backend Engineer",
    }
