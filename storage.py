"""Persistence facade over the SQLAlchemy session factory."""
import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select

from models import Employee, Evaluation, JobListing, Leave, Resume, utcnow

LOGGER = logging.getLogger(__name__)


class ListingInUse(Exception):
    """A job listing cannot be deleted while resumes still reference it."""


class Store:
    def __init__(self, session_factory):
        self.Session = session_factory

    def _add(self, obj):
        with self.Session() as s:
            s.add(obj)
            s.commit()
            s.refresh(obj)
            return obj

    def _all(self, model, *where, order_by=None):
        with self.Session() as s:
            stmt = select(model).where(*where).order_by(order_by if order_by is not None else model.id)
            return list(s.scalars(stmt))

    def _get(self, model, obj_id):
        with self.Session() as s:
            return s.get(model, obj_id)

    def _update(self, model, obj_id, **values):
        with self.Session() as s:
            obj = s.get(model, obj_id)
            if obj is None:
                return None
            for key, value in values.items():
                setattr(obj, key, value)
            s.commit()
            s.refresh(obj)
            return obj

    # -------------------------------------------------------------------
    # Resumes
    # -------------------------------------------------------------------
    def create_resume(self, fields: dict) -> Resume:
        """Insert a submission in ``pending`` state with every AI field null.

        The referenced listing is locked and re-read in the same transaction
        as the insert; a reference to a listing that no longer exists is
        stored as null.
        """
        resume = Resume(**fields)
        resume.status = "pending"
        resume.ai_score = None
        resume.match_score = None
        resume.ai_feedback = None
        resume.parsed_skills = None
        resume.suggested_questions = None
        resume.education = None
        resume.experience = None
        with self.Session() as s:
            if resume.job_listing_id is not None:
                listing = s.get(JobListing, resume.job_listing_id, with_for_update=True)
                if listing is None:
                    LOGGER.info("Job listing %s does not exist, storing resume without it", resume.job_listing_id)
                    resume.job_listing_id = None
            s.add(resume)
            s.commit()
            s.refresh(resume)
            return resume

    def update_resume_analysis(self, resume_id: int, result) -> Optional[Resume]:
        return self._update(
            Resume, resume_id,
            ai_score=result.score,
            match_score=result.match_score,
            ai_feedback=result.feedback.to_json(),
            parsed_skills=result.feedback.skills_identified,
            suggested_questions=result.suggested_questions,
            experience=result.experience,
            education=result.education,
            status="processed",
        )

    def mark_analysis_failed(self, resume_id: int, feedback: dict) -> Optional[Resume]:
        return self._update(
            Resume, resume_id,
            ai_score=None,
            match_score=None,
            ai_feedback=feedback,
            status="error",
        )

    def fail_stale_pending(self, older_than: timedelta) -> int:
        """Mark resumes stuck in ``pending`` (e.g. after a crash) as ``error``."""
        cutoff = utcnow() - older_than
        with self.Session() as s:
            stale = list(s.scalars(
                select(Resume).where(Resume.status == "pending", Resume.submitted_at < cutoff)
            ))
            for resume in stale:
                resume.status = "error"
                resume.ai_feedback = {
                    "error": "Analysis was interrupted before completion",
                    "errorType": "interrupted",
                    "retryable": True,
                }
            s.commit()
        if stale:
            LOGGER.warning("Marked %s stale pending resumes as error", len(stale))
        return len(stale)

    def get_resumes(self) -> List[Resume]:
        return self._all(Resume)

    def get_resume(self, resume_id: int) -> Optional[Resume]:
        return self._get(Resume, resume_id)

    # -------------------------------------------------------------------
    # Job listings
    # -------------------------------------------------------------------
    def get_job_listing(self, listing_id: int) -> Optional[JobListing]:
        return self._get(JobListing, listing_id)

    def get_job_listings(self, status: Optional[str] = None) -> List[JobListing]:
        where = [JobListing.status == status] if status else []
        return self._all(JobListing, *where, order_by=JobListing.posted_at.desc())

    def create_job_listing(self, fields: dict) -> JobListing:
        listing = JobListing(**fields)
        listing.status = "active"
        listing.posted_at = utcnow()
        return self._add(listing)

    def update_job_listing_status(self, listing_id: int, status: str) -> Optional[JobListing]:
        return self._update(JobListing, listing_id, status=status)

    def delete_job_listing(self, listing_id: int) -> bool:
        with self.Session() as s:
            listing = s.get(JobListing, listing_id, with_for_update=True)
            if listing is None:
                return False
            in_use = s.scalar(select(Resume.id).where(Resume.job_listing_id == listing_id).limit(1))
            if in_use is not None:
                raise ListingInUse(f"Job listing {listing_id} is referenced by existing resumes")
            s.delete(listing)
            s.commit()
            return True

    # -------------------------------------------------------------------
    # Employees, leaves, evaluations
    # -------------------------------------------------------------------
    def get_employees(self) -> List[Employee]:
        return self._all(Employee)

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self._get(Employee, employee_id)

    def get_employee_by_email(self, email: str) -> Optional[Employee]:
        with self.Session() as s:
            return s.scalar(select(Employee).where(Employee.email == email))

    def create_employee(self, fields: dict) -> Employee:
        return self._add(Employee(**fields))

    def get_leaves(self) -> List[Leave]:
        return self._all(Leave)

    def create_leave(self, fields: dict) -> Leave:
        return self._add(Leave(**fields))

    def update_leave_status(self, leave_id: int, status: str) -> Optional[Leave]:
        return self._update(Leave, leave_id, status=status)

    def get_evaluations(self, employee_id: Optional[int] = None) -> List[Evaluation]:
        where = [Evaluation.employee_id == employee_id] if employee_id is not None else []
        return self._all(Evaluation, *where)

    def create_evaluation(self, fields: dict) -> Evaluation:
        return self._add(Evaluation(**fields))
