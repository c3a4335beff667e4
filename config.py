import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

IS_HF = os.environ.get("SPACE_ID") is not None


def _csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    """Runtime configuration, read from the environment (and a local .env)."""

    base_dir: str = "data"
    database_url: str = ""
    groq_api_key: str | None = None
    groq_api_url: str = "https://api.groq.com/openai/v1/chat/completions"
    model_name: str = "llama-3.3-70b-versatile"
    llm_timeout: float = 60.0
    llm_temperature: float = 0.2
    analysis_mode: str = "enhanced"
    pending_timeout_minutes: int = 15
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.database_url:
            self.database_url = f"sqlite:///{os.path.join(self.base_dir, 'app.db')}"
        if self.analysis_mode not in ("basic", "enhanced"):
            raise ValueError(f"ANALYSIS_MODE must be 'basic' or 'enhanced', got {self.analysis_mode!r}")

    @classmethod
    def from_env(cls) -> "Settings":
        base_dir = os.getenv("BASE_DIR", "/tmp/data" if IS_HF else "data")
        return cls(
            base_dir=base_dir,
            database_url=os.getenv("DATABASE_URL", ""),
            groq_api_key=os.getenv("GROQ_API_KEY"),
            groq_api_url=os.getenv("GROQ_API_URL", cls.groq_api_url),
            model_name=os.getenv("MODEL_NAME", cls.model_name),
            llm_timeout=float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.2")),
            analysis_mode=os.getenv("ANALYSIS_MODE", "enhanced").strip().lower(),
            pending_timeout_minutes=int(os.getenv("PENDING_TIMEOUT_MINUTES", "15")),
            cors_origins=_csv(os.getenv("CORS_ORIGINS", "*")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
