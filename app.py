import logging
import os
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, FastAPI, File, Form, HTTPException, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from config import Settings
from models import Base
from parsers.pdf import pdf_to_text
from schemas import (
    EmployeeCreate, EmployeeOut, EvaluationCreate, EvaluationOut, JobListingCreate, JobListingOut,
    JobListingStatusUpdate, LeaveCreate, LeaveOut, LeaveStatusUpdate, ResumeCreate, ResumeOut,
)
from screening.analyzer import ResumeAnalyzer
from screening.llm_groq import GroqChatClient
from screening.pipeline import ResumePipeline
from storage import ListingInUse, Store

LOGGER = logging.getLogger(__name__)


class FieldError(Exception):
    """Request passed schema validation but a field refers to something unusable."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def _format_errors(errors) -> list:
    return [
        {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
        for err in errors
    ]


def _validation_response(errors: list) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": "Validation error", "errors": errors})


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def _make_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, future=True, connect_args=connect_args)


def create_app(settings: Optional[Settings] = None, llm_client=None) -> FastAPI:
    """Build the API. ``llm_client`` overrides the Groq client (tests pass a fake)."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle: database, text-generation client, pipeline."""
        if settings.database_url.startswith("sqlite"):
            os.makedirs(settings.base_dir, exist_ok=True)
        LOGGER.info("Database: %s", settings.database_url)
        engine = _make_engine(settings.database_url)
        Base.metadata.create_all(engine)
        Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)

        store = Store(Session)
        store.fail_stale_pending(timedelta(minutes=settings.pending_timeout_minutes))

        client = llm_client
        owns_client = client is None
        if owns_client:
            if not settings.groq_api_key:
                LOGGER.warning("GROQ_API_KEY is not set; resume analysis will end in error status")
            client = GroqChatClient(
                api_key=settings.groq_api_key,
                model=settings.model_name,
                url=settings.groq_api_url,
                timeout=settings.llm_timeout,
                temperature=settings.llm_temperature,
            )

        analyzer = ResumeAnalyzer(client, mode=settings.analysis_mode)
        app.state.store = store
        app.state.pipeline = ResumePipeline(analyzer, store)
        LOGGER.info("Resume analysis mode: %s (model %s)", settings.analysis_mode, settings.model_name)

        yield

        if owns_client:
            client.close()
        engine.dispose()
        LOGGER.info("Application shutting down.")

    app = FastAPI(title="HR Screening API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _validation_response(_format_errors(exc.errors()))

    @app.exception_handler(FieldError)
    async def field_error_handler(request: Request, exc: FieldError):
        return _validation_response([{"field": exc.field, "message": exc.message}])

    app.include_router(router)
    return app


router = APIRouter()


def _store(request: Request) -> Store:
    return request.app.state.store


@router.get("/", tags=["health"])
def root():
    return {"status": "ok", "service": "hr-screening"}


# -------------------------------------------------------------------
# Resumes
# -------------------------------------------------------------------
def _submit_resume(request: Request, payload: ResumeCreate):
    """Resolve the job reference, then run the create/analyze/update pipeline."""
    store = _store(request)
    fields = payload.model_dump(mode="json")

    if payload.job_listing_id is not None:
        listing = store.get_job_listing(payload.job_listing_id)
        if listing is None:
            if payload.position is None:
                raise FieldError("jobListingId", f"Job listing {payload.job_listing_id} not found")
            LOGGER.info("Job listing %s not found, using position %r", payload.job_listing_id, payload.position)
        elif listing.status != "active":
            raise FieldError("jobListingId", f"Job listing {listing.id} is closed")
        elif payload.position is None:
            fields["position"] = listing.title

    return request.app.state.pipeline.process_submission(fields)


@router.post("/resumes", response_model=ResumeOut, status_code=201)
def create_resume(payload: ResumeCreate, request: Request):
    return _submit_resume(request, payload)


@router.post("/resumes/upload", response_model=ResumeOut, status_code=201)
def upload_resume(
    request: Request,
    resume: UploadFile = File(...),
    candidate_name: str = Form(..., alias="candidateName"),
    email: str = Form(...),
    phone: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    job_listing_id: Optional[int] = Form(None, alias="jobListingId"),
    job_description_url: Optional[str] = Form(None, alias="jobDescriptionUrl"),
):
    """Same as POST /resumes, with the resume text taken from an uploaded PDF."""
    resume_text = pdf_to_text(resume.file.read())
    if not resume_text:
        raise FieldError("resume", f"Could not extract text from {resume.filename}")

    try:
        payload = ResumeCreate(
            candidate_name=candidate_name,
            email=email,
            phone=phone,
            resume_text=resume_text,
            position=position,
            job_listing_id=job_listing_id,
            job_description_url=job_description_url or None,
        )
    except ValidationError as e:
        return _validation_response(_format_errors(e.errors()))
    return _submit_resume(request, payload)


@router.get("/resumes", response_model=List[ResumeOut])
def list_resumes(request: Request):
    return _store(request).get_resumes()


@router.get("/resumes/{resume_id}", response_model=ResumeOut)
def get_resume(resume_id: int, request: Request):
    resume = _store(request).get_resume(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail=f"Resume {resume_id} not found.")
    return resume


# -------------------------------------------------------------------
# Job listings
# -------------------------------------------------------------------
@router.post("/job-listings", response_model=JobListingOut, status_code=201)
def create_job_listing(payload: JobListingCreate, request: Request):
    return _store(request).create_job_listing(payload.model_dump())


@router.get("/job-listings", response_model=List[JobListingOut])
def list_job_listings(request: Request, status: Optional[str] = None):
    return _store(request).get_job_listings(status=status)


@router.get("/job-listings/{listing_id}", response_model=JobListingOut)
def get_job_listing(listing_id: int, request: Request):
    listing = _store(request).get_job_listing(listing_id)
    if not listing:
        raise HTTPException(status_code=404, detail=f"Job listing {listing_id} not found.")
    return listing


@router.patch("/job-listings/{listing_id}/status", response_model=JobListingOut)
def update_job_listing_status(listing_id: int, payload: JobListingStatusUpdate, request: Request):
    listing = _store(request).update_job_listing_status(listing_id, payload.status)
    if not listing:
        raise HTTPException(status_code=404, detail=f"Job listing {listing_id} not found.")
    return listing


@router.delete("/job-listings/{listing_id}", status_code=204)
def delete_job_listing(listing_id: int, request: Request):
    try:
        deleted = _store(request).delete_job_listing(listing_id)
    except ListingInUse as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Job listing {listing_id} not found.")
    return Response(status_code=204)


# -------------------------------------------------------------------
# Employees, leaves, evaluations
# -------------------------------------------------------------------
def _require_employee(store: Store, employee_id: int):
    if store.get_employee(employee_id) is None:
        raise FieldError("employeeId", f"Employee {employee_id} not found")


@router.get("/employees", response_model=List[EmployeeOut])
def list_employees(request: Request):
    return _store(request).get_employees()


@router.post("/employees", response_model=EmployeeOut, status_code=201)
def create_employee(payload: EmployeeCreate, request: Request):
    store = _store(request)
    if store.get_employee_by_email(payload.email):
        raise HTTPException(status_code=409, detail=f"Employee with email {payload.email} already exists.")
    return store.create_employee(payload.model_dump())


@router.get("/employees/{employee_id}", response_model=EmployeeOut)
def get_employee(employee_id: int, request: Request):
    employee = _store(request).get_employee(employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@router.get("/employees/{employee_id}/evaluations", response_model=List[EvaluationOut])
def list_employee_evaluations(employee_id: int, request: Request):
    return _store(request).get_evaluations(employee_id=employee_id)


@router.get("/leaves", response_model=List[LeaveOut])
def list_leaves(request: Request):
    return _store(request).get_leaves()


@router.post("/leaves", response_model=LeaveOut, status_code=201)
def create_leave(payload: LeaveCreate, request: Request):
    store = _store(request)
    _require_employee(store, payload.employee_id)
    return store.create_leave(payload.model_dump())


@router.patch("/leaves/{leave_id}/status", response_model=LeaveOut)
def update_leave_status(leave_id: int, payload: LeaveStatusUpdate, request: Request):
    leave = _store(request).update_leave_status(leave_id, payload.status)
    if not leave:
        raise HTTPException(status_code=404, detail="Leave not found")
    return leave


@router.get("/evaluations", response_model=List[EvaluationOut])
def list_evaluations(request: Request):
    return _store(request).get_evaluations()


@router.post("/evaluations", response_model=EvaluationOut, status_code=201)
def create_evaluation(payload: EvaluationCreate, request: Request):
    store = _store(request)
    _require_employee(store, payload.employee_id)
    return store.create_evaluation(payload.model_dump())


app = create_app()
