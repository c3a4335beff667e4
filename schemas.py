from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator, model_validator
from pydantic.alias_generators import to_camel

RESUME_MIN_LENGTH = 50


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Resume submission (intake)
class ResumeCreate(CamelModel):
    candidate_name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = None
    resume_text: str = Field(min_length=RESUME_MIN_LENGTH)
    position: Optional[str] = Field(default=None, max_length=200)
    job_listing_id: Optional[int] = None
    job_description_url: Optional[HttpUrl] = None

    @field_validator("position", "phone")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @model_validator(mode="after")
    def position_or_listing(self):
        if self.position is None and self.job_listing_id is None:
            raise ValueError("Either position or job listing must be provided")
        return self


class ResumeOut(CamelModel):
    id: int
    candidate_name: str
    email: str
    phone: Optional[str] = None
    position: str
    resume_text: str
    job_description_url: Optional[str] = None
    job_listing_id: Optional[int] = None
    submitted_at: datetime
    ai_score: Optional[int] = None
    match_score: Optional[int] = None
    ai_feedback: Optional[Dict[str, Any]] = None
    parsed_skills: Optional[List[Any]] = None
    suggested_questions: Optional[List[Any]] = None
    education: Optional[List[Dict[str, Any]]] = None
    experience: Optional[List[Dict[str, Any]]] = None
    status: str


# Job listing model
class JobListingCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    department: str = Field(min_length=1)
    description: str = Field(min_length=1)
    requirements: List[str]
    preferred_skills: Optional[List[str]] = None


class JobListingOut(CamelModel):
    id: int
    title: str
    department: str
    description: str
    requirements: List[str]
    preferred_skills: Optional[List[str]] = None
    status: str
    posted_at: datetime


class JobListingStatusUpdate(CamelModel):
    status: Literal["active", "closed"]


class EmployeeCreate(CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    position: str = Field(min_length=1, max_length=100)
    department: str = Field(min_length=1)
    join_date: date
    status: Literal["active", "inactive"] = "active"
    profile_image: Optional[str] = None


class EmployeeOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    position: str
    department: str
    join_date: date
    status: str
    profile_image: Optional[str] = None


class LeaveCreate(CamelModel):
    employee_id: int
    start_date: date
    end_date: date
    type: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    status: Literal["pending", "approved", "rejected"] = "pending"

    @model_validator(mode="after")
    def end_not_before_start(self):
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class LeaveStatusUpdate(CamelModel):
    status: Literal["pending", "approved", "rejected"]


class LeaveOut(CamelModel):
    id: int
    employee_id: int
    start_date: date
    end_date: date
    type: str
    reason: str
    status: str


class EvaluationCreate(CamelModel):
    employee_id: int
    evaluation_date: date
    performance: int = Field(ge=1, le=5)
    feedback: str = Field(min_length=1)
    goals: List[str] = []


class EvaluationOut(CamelModel):
    id: int
    employee_id: int
    evaluation_date: date
    performance: int
    feedback: str
    goals: List[str]
