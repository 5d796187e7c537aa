"""SQLModel data models.

This module defines the application's database tables using SQLModel.
An `Assessment` owns its ordered `Question` rows; a `Response` refers
to its assessment by id only, so deleting an assessment leaves its
responses in place.
"""

from typing import Optional, List
from sqlalchemy import Column, DateTime, JSON
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Store timestamps as naive UTC and hand them back timezone-aware.

    SQLite keeps no offset, so values read back are tagged as UTC.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class User(SQLModel, table=True):
    """An administrator account.

    Fields:
    - `username`: unique login name
    - `password_hash`: hashed password string (never store plaintext)
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(UTCDateTime, nullable=False))


class Assessment(SQLModel, table=True):
    """A titled, ordered set of multiple-choice questions.

    `version` starts at 1 and is bumped each time the questions are
    replaced, so responses can record which answer key they were scored
    against.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    version: int = 1
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(UTCDateTime, nullable=False))
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(UTCDateTime))
    questions: List['Question'] = Relationship(
        back_populates='assessment',
        sa_relationship_kwargs={'cascade': 'all, delete-orphan'},
    )

    @property
    def ordered_questions(self) -> List['Question']:
        return sorted(self.questions, key=lambda q: q.position)


class Question(SQLModel, table=True):
    """One question of an `Assessment`, identified by its `position`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    assessment_id: Optional[int] = Field(default=None, foreign_key='assessment.id', index=True)
    position: int
    text: str
    options: List[str] = Field(sa_column=Column(JSON, nullable=False))
    correct_answer_index: int
    assessment: Optional[Assessment] = Relationship(back_populates='questions')


class Response(SQLModel, table=True):
    """A respondent's submitted answers and the score computed at submission.

    `snapshot` keeps the owner view of the assessment as it was scored,
    so the result page stays consistent after the assessment is edited
    or deleted.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    assessment_id: int = Field(index=True)
    assessment_version: int
    name: str
    email: str
    answers: List[int] = Field(sa_column=Column(JSON, nullable=False))
    score: int
    submitted_at: datetime = Field(default_factory=utcnow, sa_column=Column(UTCDateTime, nullable=False))
    snapshot: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))


def ordered_questions(assessment) -> list:
    """Return the questions of `assessment` in position order.

    Works for persisted `Assessment` rows (whose relationship is
    unordered) as well as for pydantic views that already hold an
    ordered `questions` list.
    """
    if isinstance(assessment, Assessment):
        return assessment.ordered_questions
    return list(assessment.questions)
