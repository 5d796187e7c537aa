"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
assessments, responses). Repositories return SQLModel objects, commit
per write and turn database failures into `PersistenceError` after
rolling the session back.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from . import models
from .errors import PersistenceError


class _Repository:
    def __init__(self, session: Session):
        self.session = session

    def _commit(self, action: str):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"failed to {action}") from e

    def _get(self, action: str, model, key):
        try:
            return self.session.get(model, key)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"failed to {action}") from e

    def _run(self, action: str, stmt):
        try:
            return self.session.exec(stmt)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"failed to {action}") from e


class UserRepository(_Repository):
    """CRUD operations for administrator `User` objects."""

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self._commit("create user")
        self.session.refresh(user)
        return user

    def get_by_username(self, username: str) -> Optional[models.User]:
        """Return a `User` by username or `None` if not found."""
        stmt = select(models.User).where(models.User.username == username)
        return self._run("load user", stmt).first()

    def count(self) -> int:
        stmt = select(func.count()).select_from(models.User)
        return self._run("count users", stmt).one()

    def get(self, user_id: int) -> Optional[models.User]:
        return self._get("load user", models.User, user_id)


class AssessmentRepository(_Repository):
    """CRUD operations for `Assessment` and its `Question` rows."""

    def create(self, assessment: models.Assessment, questions: List[models.Question]) -> models.Assessment:
        """Create an assessment together with its questions in one commit."""
        assessment.questions = questions
        self.session.add(assessment)
        self._commit("create assessment")
        self.session.refresh(assessment)
        return assessment

    def get(self, assessment_id: int) -> Optional[models.Assessment]:
        return self._get("load assessment", models.Assessment, assessment_id)

    def list_all(self) -> List[models.Assessment]:
        """Return all assessments, newest first."""
        stmt = select(models.Assessment).order_by(models.Assessment.created_at.desc(), models.Assessment.id.desc())
        return self._run("list assessments", stmt).all()

    def replace(self, assessment: models.Assessment, title: str, description: str, questions: List[models.Question]) -> models.Assessment:
        """Overwrite title, description and the whole question list.

        Old question rows are removed by the delete-orphan cascade and
        the assessment version is bumped.
        """
        assessment.title = title
        assessment.description = description
        assessment.questions = questions
        assessment.version += 1
        assessment.updated_at = models.utcnow()
        self.session.add(assessment)
        self._commit("update assessment")
        self.session.refresh(assessment)
        return assessment

    def delete(self, assessment: models.Assessment) -> None:
        """Delete the assessment and its questions; responses are kept."""
        self.session.delete(assessment)
        self._commit("delete assessment")


class ResponseRepository(_Repository):
    """Persist and query submitted `Response` records."""

    def create(self, response: models.Response) -> models.Response:
        self.session.add(response)
        self._commit("save response")
        self.session.refresh(response)
        return response

    def get(self, response_id: int) -> Optional[models.Response]:
        return self._get("load response", models.Response, response_id)

    def list_by_assessment(self, assessment_id: int, offset: int = 0, limit: Optional[int] = None) -> List[models.Response]:
        """Return responses for `assessment_id` in submission order."""
        stmt = (
            select(models.Response)
            .where(models.Response.assessment_id == assessment_id)
            .order_by(models.Response.submitted_at, models.Response.id)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._run("list responses", stmt).all()

    def count_by_assessment(self, assessment_id: int) -> int:
        stmt = select(func.count()).select_from(models.Response).where(models.Response.assessment_id == assessment_id)
        return self._run("count responses", stmt).one()

    def delete(self, response: models.Response) -> None:
        self.session.delete(response)
        self._commit("delete response")
