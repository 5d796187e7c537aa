"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and the pure kernels in `utils`. Services are intentionally thin: they
validate input, execute domain logic and persist aggregates via
repositories. Domain failures are raised as `errors.AssessmentError`
subclasses and mapped to HTTP statuses by the application.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional
from passlib.context import CryptContext
import jwt
from sqlmodel import Session
from . import models, repositories
from .config import settings
from .errors import NotFoundError, ValidationError
from .schemas import AssessmentDraft, ResponseIn, ResponsePage, SubmissionResult, Summary
from .utils.aggregation import aggregate
from .utils.export import responses_to_csv
from .utils.importer import validate_import
from .utils.scoring import score_answers, validate_submission
from .utils.views import to_response_out, to_snapshot

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
logger = logging.getLogger("assessment_api.services")


def _log(event: str, **fields):
    logger.info("%s %s", event, json.dumps(fields, ensure_ascii=True, default=str))


class AuthService:
    """Administrator authentication (register + authenticate)."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, username: str, password: str) -> models.User:
        """Create a new administrator with a hashed password."""
        if not username.strip() or not password:
            raise ValidationError("username and password are required", field="username")
        hashed = PWD_CTX.hash(password)
        u = models.User(username=username.strip(), password_hash=hashed)
        return self.user_repo.create(u)

    def authenticate(self, username: str, password: str) -> Optional[str]:
        """Verify credentials and return a signed JWT token on success.

        Returns `None` if authentication fails.
        """
        user = self.user_repo.get_by_username(username)
        if not user:
            return None
        if not PWD_CTX.verify(password, user.password_hash):
            return None
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)
        payload = {"user_id": user.id, "username": user.username, "exp": int(expire.timestamp())}
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _question_rows(draft: AssessmentDraft) -> List[models.Question]:
    return [
        models.Question(position=i, text=q.text, options=list(q.options), correct_answer_index=q.correct_answer_index)
        for i, q in enumerate(draft.questions)
    ]


class AssessmentService:
    """Create, read, replace and delete assessments."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.AssessmentRepository(session)

    def list(self) -> List[models.Assessment]:
        return self.repo.list_all()

    def get(self, assessment_id: int) -> models.Assessment:
        """Return the assessment or raise `NotFoundError`."""
        assessment = self.repo.get(assessment_id)
        if not assessment:
            raise NotFoundError(f"assessment not found: {assessment_id}")
        return assessment

    def create(self, raw: Any) -> models.Assessment:
        """Validate an untyped payload and persist it as a new assessment.

        Used for both direct creation and JSON import. Any `id` or
        `created_at` in the payload is ignored; the database assigns them.
        """
        draft = validate_import(raw)
        return self.create_from_draft(draft)

    def create_from_draft(self, draft: AssessmentDraft) -> models.Assessment:
        assessment = models.Assessment(title=draft.title, description=draft.description)
        created = self.repo.create(assessment, _question_rows(draft))
        _log("assessment_created", assessment_id=created.id, questions=len(draft.questions))
        return created

    def update(self, assessment_id: int, raw: Any) -> models.Assessment:
        """Replace title, description and questions wholesale.

        Stored responses keep their score and snapshot.
        """
        assessment = self.get(assessment_id)
        draft = validate_import(raw)
        updated = self.repo.replace(assessment, draft.title, draft.description, _question_rows(draft))
        _log("assessment_updated", assessment_id=updated.id, version=updated.version, questions=len(draft.questions))
        return updated

    def delete(self, assessment_id: int) -> None:
        assessment = self.get(assessment_id)
        self.repo.delete(assessment)
        _log("assessment_deleted", assessment_id=assessment_id)


class ResponseService:
    """Score submissions and manage stored responses."""
    def __init__(self, session: Session):
        self.session = session
        self.assessments = AssessmentService(session)
        self.repo = repositories.ResponseRepository(session)

    def submit(self, submission: ResponseIn) -> SubmissionResult:
        """Score a submission and persist it as a new `Response`.

        The whole submission is rejected (nothing persisted) when the
        answer count differs from the question count, when any question
        is unanswered (`-1`), or when an index is out of range.
        """
        assessment = self.assessments.get(submission.assessment_id)
        try:
            validate_submission(assessment, submission.answers)
        except ValidationError as e:
            _log("submission_rejected", assessment_id=assessment.id, reason=e.message)
            raise
        result = score_answers(assessment, submission.answers)
        snapshot = to_snapshot(assessment)
        response = models.Response(
            assessment_id=assessment.id,
            assessment_version=assessment.version,
            name=submission.name,
            email=submission.email,
            answers=list(submission.answers),
            score=result.score,
            snapshot=snapshot.model_dump(),
        )
        created = self.repo.create(response)
        _log("response_submitted", response_id=created.id, assessment_id=assessment.id, score=created.score)
        return SubmissionResult(
            response=to_response_out(created),
            total_questions=len(snapshot.questions),
            correct_answers=[q.correct_answer_index for q in snapshot.questions],
            per_question_correct=result.per_question_correct,
        )

    def get(self, response_id: int) -> models.Response:
        response = self.repo.get(response_id)
        if not response:
            raise NotFoundError(f"response not found: {response_id}")
        return response

    def list_for_assessment(self, assessment_id: int, offset: int = 0, limit: Optional[int] = None) -> ResponsePage:
        """Return one page of responses for an assessment.

        Responses outlive their assessment, so an unknown assessment id
        is not an error here; it simply yields whatever is stored.
        """
        if offset < 0:
            raise ValidationError("offset must be >= 0", field="offset")
        if limit is None:
            limit = settings.RESPONSES_PAGE_DEFAULT
        if limit < 1:
            raise ValidationError("limit must be >= 1", field="limit")
        limit = min(limit, settings.RESPONSES_PAGE_MAX)
        rows = self.repo.list_by_assessment(assessment_id, offset=offset, limit=limit)
        total = self.repo.count_by_assessment(assessment_id)
        return ResponsePage(items=[to_response_out(r) for r in rows], total=total, offset=offset, limit=limit)

    def delete(self, response_id: int) -> None:
        response = self.get(response_id)
        self.repo.delete(response)
        _log("response_deleted", response_id=response_id)


class ReportService:
    """Summary statistics and CSV export for assessment owners."""
    def __init__(self, session: Session):
        self.session = session
        self.assessments = AssessmentService(session)
        self.responses = repositories.ResponseRepository(session)

    def summary(self, assessment_id: int) -> Summary:
        assessment = self.assessments.get(assessment_id)
        rows = self.responses.list_by_assessment(assessment.id)
        return aggregate(assessment, rows)

    def export_csv(self, assessment_id: int) -> str:
        assessment = self.assessments.get(assessment_id)
        rows = self.responses.list_by_assessment(assessment.id)
        _log("responses_exported", assessment_id=assessment.id, rows=len(rows))
        return responses_to_csv(rows)
