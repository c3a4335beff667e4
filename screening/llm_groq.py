import logging

import requests

from .errors import LLMServiceError

LOGGER = logging.getLogger(__name__)


class GroqChatClient:
    """Thin client for Groq's OpenAI-compatible chat-completions endpoint.

    Built once at startup and handed to the analyzer. Makes exactly one
    request per call; retries are left to whoever resubmits.
    """

    def __init__(self, api_key, model="llama-3.3-70b-versatile",
                 url="https://api.groq.com/openai/v1/chat/completions",
                 timeout=60.0, temperature=0.2, session=None):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout
        self.temperature = temperature
        self.session = session or requests.Session()

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat request and return the raw message content."""
        if not self.api_key:
            raise LLMServiceError("GROQ_API_KEY is not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }

        try:
            response = self.session.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise LLMServiceError(f"Groq request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise LLMServiceError(f"Groq request failed: {e}") from e
        except ValueError as e:
            raise LLMServiceError("Groq returned a non-JSON envelope") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMServiceError("Groq response had no message content") from e
        if not isinstance(content, str):
            raise LLMServiceError(f"Groq returned {type(content).__name__} content instead of text")
        if not content:
            raise LLMServiceError("Groq returned empty content")

        LOGGER.debug("Groq raw response (%s chars)", len(content))
        return content

    def close(self):
        self.session.close()
