"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable. Public and owner views of
an assessment are separate types: `PublicQuestion` has no answer-key
field at all, so a respondent-facing payload cannot carry one.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, StrictInt, field_validator


class RegisterIn(BaseModel):
    """Payload for administrator registration/login endpoints."""
    username: str
    password: str


class TokenOut(BaseModel):
    """Authentication response containing an access token."""
    access_token: str


class PublicQuestion(BaseModel):
    """A question as shown to respondents."""
    text: str
    options: List[str]


class OwnerQuestion(PublicQuestion):
    """A question including its answer key."""
    correct_answer_index: int


class AssessmentDraft(BaseModel):
    """A validated assessment payload, not yet persisted."""
    title: str
    description: str
    questions: List[OwnerQuestion]


class PublicAssessment(BaseModel):
    id: int
    title: str
    description: str
    version: int
    created_at: datetime
    questions: List[PublicQuestion]


class OwnerAssessment(BaseModel):
    id: int
    title: str
    description: str
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    questions: List[OwnerQuestion]


class AssessmentListing(BaseModel):
    """Catalogue entry returned by the assessment list endpoint."""
    id: int
    title: str
    description: str
    question_count: int
    created_at: datetime


class AssessmentSnapshot(BaseModel):
    """Owner view of an assessment frozen into a response at submission."""
    title: str
    description: str
    version: int
    questions: List[OwnerQuestion]


class ResponseIn(BaseModel):
    """Submission of one respondent's answers.

    `answers[i]` is the selected option index for question `i`; `-1`
    marks an unanswered question and is rejected by the service.
    """
    assessment_id: int
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    answers: List[StrictInt]

    @field_validator('name', 'email')
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v


class ResponseOut(BaseModel):
    id: int
    assessment_id: int
    assessment_version: int
    name: str
    email: str
    answers: List[int]
    score: int
    submitted_at: datetime


class SubmissionResult(BaseModel):
    """Payload returned right after a submission is scored."""
    response: ResponseOut
    total_questions: int
    correct_answers: List[int]
    per_question_correct: List[bool]


class ResultView(BaseModel):
    """A single response with the assessment it was scored against."""
    response: ResponseOut
    total_questions: int
    passed: bool
    assessment: AssessmentSnapshot


class ResponsePage(BaseModel):
    items: List[ResponseOut]
    total: int
    offset: int
    limit: int


class ScoreResult(BaseModel):
    score: int
    per_question_correct: List[bool]


class Summary(BaseModel):
    """Aggregate statistics over the responses to one assessment."""
    count: int
    average_score: float
    pass_rate: float
    per_question_accuracy: List[float]


class SummaryOut(Summary):
    assessment_id: int
    question_count: int
    average_score_display: str
