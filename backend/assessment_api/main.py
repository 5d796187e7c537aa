"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the assessment platform.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses. Domain errors raised by services
are rendered by the `AssessmentError` handler below.

Endpoints implemented:
- POST /auth/register
- POST /auth/login
- GET /api/assessments
- GET /api/assessments/{id}
- GET /api/assessments/{id}/with-answers (admin)
- POST /api/assessments (admin)
- POST /api/assessments/import (admin)
- POST /api/assessments/import/file (admin)
- PUT /api/assessments/{id} (admin)
- DELETE /api/assessments/{id} (admin)
- GET /api/assessments/{id}/summary (admin)
- GET /api/assessments/{id}/export.csv (admin)
- POST /api/responses
- GET /api/responses/{id}
- GET /api/responses/assessment/{assessment_id} (admin)
- DELETE /api/responses/{id} (admin)
- GET /health
"""

from typing import Any, List, Optional
from fastapi import FastAPI, Body, Depends, UploadFile, File, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services, repositories, models
from .auth import optional_admin, require_admin
from .config import settings
from .errors import AssessmentError
from .schemas import (
    AssessmentListing,
    OwnerAssessment,
    PublicAssessment,
    RegisterIn,
    ResponseIn,
    ResponsePage,
    ResultView,
    SubmissionResult,
    SummaryOut,
    TokenOut,
)
from .utils.export import export_filename
from .utils.importer import parse_import_file
from .utils.views import to_listing, to_owner_view, to_public_view, to_result_view

app = FastAPI(title="Assessment Platform API")
logger = logging.getLogger("assessment_api.api")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


def _request_log(event: str, request: Request, req_id: str, started: float, **extra) -> str:
    data = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
        "client": request.client.host if request.client else "unknown",
    }
    data.update(extra)
    return f"{event} {json.dumps(data, ensure_ascii=True)}"


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(_request_log("request_failed", request, req_id, started))
        raise
    response.headers["X-Request-ID"] = req_id
    logger.info(_request_log("request_done", request, req_id, started, status_code=response.status_code))
    return response


@app.exception_handler(AssessmentError)
async def assessment_error_handler(request: Request, exc: AssessmentError):
    """Render domain errors as JSON with their mapped status code."""
    content = {"detail": exc.message}
    field = getattr(exc, "field", None)
    if field:
        content["field"] = field
    if exc.status_code >= 500:
        logger.error("domain_error %s", json.dumps({"path": request.url.path, "error": exc.message}, ensure_ascii=True))
    return JSONResponse(status_code=exc.status_code, content=content)


def _enforce_import_size(request: Request) -> None:
    """Reject assessment bodies larger than `MAX_IMPORT_BYTES`."""
    try:
        length = int(request.headers.get("content-length", "0"))
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid content-length")
    if length > settings.MAX_IMPORT_BYTES:
        raise HTTPException(status_code=400, detail="payload too large")


@app.post('/auth/register')
def register(payload: RegisterIn, db: Session = Depends(get_session), admin: Optional[models.User] = Depends(optional_admin)):
    """Register an administrator account (idempotent).

    The first account bootstraps the platform and needs no token (unless
    `ALLOW_REGISTRATION` is false); every later account must be created
    by an authenticated administrator. Returns the existing user if the
    username is already taken.
    """
    if admin is None:
        if repositories.UserRepository(db).count() > 0:
            raise HTTPException(status_code=403, detail='administrator token required')
        if not settings.ALLOW_REGISTRATION:
            raise HTTPException(status_code=403, detail='registration disabled')
    existing = repositories.UserRepository(db).get_by_username(payload.username)
    if existing:
        return {'id': existing.id, 'username': existing.username}
    user = services.AuthService(db).register(payload.username, payload.password)
    return {'id': user.id, 'username': user.username}


@app.post('/auth/login', response_model=TokenOut)
def login(payload: RegisterIn, db: Session = Depends(get_session)):
    """Authenticate an administrator and return a short-lived JWT token."""
    token = services.AuthService(db).authenticate(payload.username, payload.password)
    if not token:
        raise HTTPException(status_code=401, detail='invalid credentials')
    return TokenOut(access_token=token)


@app.get('/api/assessments', response_model=List[AssessmentListing])
def list_assessments(db: Session = Depends(get_session)):
    """List all assessments without their questions or answer keys."""
    return [to_listing(a) for a in services.AssessmentService(db).list()]


@app.get('/api/assessments/{assessment_id}', response_model=PublicAssessment)
def get_assessment(assessment_id: int, db: Session = Depends(get_session)):
    """Return an assessment as respondents see it (no answer keys)."""
    return to_public_view(services.AssessmentService(db).get(assessment_id))


@app.get('/api/assessments/{assessment_id}/with-answers', response_model=OwnerAssessment)
def get_assessment_with_answers(assessment_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Return the full assessment including answer keys."""
    return to_owner_view(services.AssessmentService(db).get(assessment_id))


@app.post('/api/assessments', response_model=OwnerAssessment, status_code=201)
def create_assessment(request: Request, payload: Any = Body(...), db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Create an assessment from `{title, description, questions}`."""
    _enforce_import_size(request)
    return to_owner_view(services.AssessmentService(db).create(payload))


@app.post('/api/assessments/import', response_model=OwnerAssessment, status_code=201)
def import_assessment(request: Request, payload: Any = Body(...), db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Import an assessment from a JSON document.

    Accepts `correctAnswerIndex` as well as `correct_answer_index`;
    any `id` or `createdAt` in the document is ignored.
    """
    _enforce_import_size(request)
    return to_owner_view(services.AssessmentService(db).create(payload))


@app.post('/api/assessments/import/file', response_model=OwnerAssessment, status_code=201)
def import_assessment_file(file: UploadFile = File(...), db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Upload a `.json` file holding a single assessment and import it."""
    if not file.filename or not file.filename.lower().endswith('.json'):
        raise HTTPException(status_code=400, detail='expected a .json file')
    content = file.file.read(settings.MAX_IMPORT_BYTES + 1)
    if len(content) > settings.MAX_IMPORT_BYTES:
        raise HTTPException(status_code=400, detail='file too large')
    draft = parse_import_file(content)
    return to_owner_view(services.AssessmentService(db).create_from_draft(draft))


@app.put('/api/assessments/{assessment_id}', response_model=OwnerAssessment)
def update_assessment(request: Request, assessment_id: int, payload: Any = Body(...), db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Replace title, description and questions of an assessment."""
    _enforce_import_size(request)
    return to_owner_view(services.AssessmentService(db).update(assessment_id, payload))


@app.delete('/api/assessments/{assessment_id}')
def delete_assessment(assessment_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Delete an assessment. Its responses are left in place."""
    services.AssessmentService(db).delete(assessment_id)
    return {'message': 'assessment removed'}


@app.get('/api/assessments/{assessment_id}/summary', response_model=SummaryOut)
def assessment_summary(assessment_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Return count, average score, pass rate and per-question accuracy."""
    summary = services.ReportService(db).summary(assessment_id)
    return SummaryOut(
        **summary.model_dump(),
        assessment_id=assessment_id,
        question_count=len(summary.per_question_accuracy),
        average_score_display=f"{summary.average_score:.2f}",
    )


@app.get('/api/assessments/{assessment_id}/export.csv')
def export_responses(assessment_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Download all responses as CSV (`name,email,score,submitted_at`)."""
    svc = services.ReportService(db)
    body = svc.export_csv(assessment_id)
    title = svc.assessments.get(assessment_id).title
    return Response(
        content=body,
        media_type='text/csv; charset=utf-8',
        headers={'Content-Disposition': f'attachment; filename="{export_filename(title)}"'},
    )


@app.post('/api/responses', response_model=SubmissionResult, status_code=201)
def submit_response(submission: ResponseIn, db: Session = Depends(get_session)):
    """Score and store a submission.

    Every question must be answered with a valid option index; the
    response includes the answer key so the respondent can review it.
    """
    return services.ResponseService(db).submit(submission)


@app.get('/api/responses/{response_id}', response_model=ResultView)
def get_response(response_id: int, db: Session = Depends(get_session)):
    """Return one response with the assessment it was scored against."""
    return to_result_view(services.ResponseService(db).get(response_id))


@app.get('/api/responses/assessment/{assessment_id}', response_model=ResponsePage)
def list_responses(
    assessment_id: int,
    offset: int = 0,
    limit: Optional[int] = None,
    db: Session = Depends(get_session),
    user: models.User = Depends(require_admin),
):
    """List responses for an assessment, one page at a time."""
    return services.ResponseService(db).list_for_assessment(assessment_id, offset=offset, limit=limit)


@app.delete('/api/responses/{response_id}')
def delete_response(response_id: int, db: Session = Depends(get_session), user: models.User = Depends(require_admin)):
    """Delete a single response."""
    services.ResponseService(db).delete(response_id)
    return {'message': 'response deleted'}


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
