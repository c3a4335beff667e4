from datetime import datetime, timezone
import json

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, TypeDecorator
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo anyway)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class JSONType(TypeDecorator):
    """Custom JSON type that works reliably with SQLite."""
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert Python object to JSON string for storage."""
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        """Convert JSON string back to Python object."""
        if value is None:
            return None
        return json.loads(value)


class JobListing(Base):
    __tablename__ = "job_listings"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    department = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(JSONType, nullable=False)
    preferred_skills = Column(JSONType, nullable=True)
    status = Column(String, nullable=False, default="active")
    posted_at = Column(DateTime, nullable=False, default=utcnow)


class Resume(Base):
    __tablename__ = "resumes"
    id = Column(Integer, primary_key=True)
    candidate_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    position = Column(String, nullable=False)
    resume_text = Column(Text, nullable=False)
    job_description_url = Column(String, nullable=True)
    job_listing_id = Column(Integer, nullable=True, index=True)  # weak reference, no FK
    submitted_at = Column(DateTime, nullable=False, default=utcnow)

    # written only by the analysis pipeline
    ai_score = Column(Integer, nullable=True)
    match_score = Column(Integer, nullable=True)
    ai_feedback = Column(JSONType, nullable=True)
    parsed_skills = Column(JSONType, nullable=True)
    suggested_questions = Column(JSONType, nullable=True)
    education = Column(JSONType, nullable=True)
    experience = Column(JSONType, nullable=True)
    status = Column(String, nullable=False, default="pending", index=True)


class Employee(Base):
    __tablename__ = "employees"
    id = Column(Integer, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    position = Column(String, nullable=False)
    department = Column(String, nullable=False)
    join_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="active")
    profile_image = Column(String, nullable=True)


class Leave(Base):
    __tablename__ = "leaves"
    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    reason = Column(Text, nullable=False)


class Evaluation(Base):
    __tablename__ = "evaluations"
    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    evaluation_date = Column(Date, nullable=False)
    performance = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=False)
    goals = Column(JSONType, nullable=False)
