"""Projections of assessments and responses into API payloads.

Public views are built from `PublicQuestion`, which has no answer-key
field, so redaction is enforced by the type rather than by masking.
Owner views carry every field.
"""

from typing import List
from .. import models
from ..models import ordered_questions
from ..schemas import (
    AssessmentListing,
    AssessmentSnapshot,
    OwnerAssessment,
    OwnerQuestion,
    PublicAssessment,
    PublicQuestion,
    ResponseOut,
    ResultView,
)
from .scoring import is_passing


def _owner_questions(assessment) -> List[OwnerQuestion]:
    return [
        OwnerQuestion(text=q.text, options=list(q.options), correct_answer_index=q.correct_answer_index)
        for q in ordered_questions(assessment)
    ]


def to_public_view(assessment: models.Assessment) -> PublicAssessment:
    """Respondent-safe view: answer keys stripped from every question."""
    return PublicAssessment(
        id=assessment.id,
        title=assessment.title,
        description=assessment.description,
        version=assessment.version,
        created_at=assessment.created_at,
        questions=[PublicQuestion(text=q.text, options=list(q.options)) for q in ordered_questions(assessment)],
    )


def to_owner_view(assessment: models.Assessment) -> OwnerAssessment:
    """Identity projection including answer keys."""
    return OwnerAssessment(
        id=assessment.id,
        title=assessment.title,
        description=assessment.description,
        version=assessment.version,
        created_at=assessment.created_at,
        updated_at=assessment.updated_at,
        questions=_owner_questions(assessment),
    )


def to_listing(assessment: models.Assessment) -> AssessmentListing:
    return AssessmentListing(
        id=assessment.id,
        title=assessment.title,
        description=assessment.description,
        question_count=len(assessment.questions),
        created_at=assessment.created_at,
    )


def to_snapshot(assessment: models.Assessment) -> AssessmentSnapshot:
    """Freeze the owner view stored alongside a new response."""
    return AssessmentSnapshot(
        title=assessment.title,
        description=assessment.description,
        version=assessment.version,
        questions=_owner_questions(assessment),
    )


def to_response_out(response: models.Response) -> ResponseOut:
    return ResponseOut(
        id=response.id,
        assessment_id=response.assessment_id,
        assessment_version=response.assessment_version,
        name=response.name,
        email=response.email,
        answers=list(response.answers),
        score=response.score,
        submitted_at=response.submitted_at,
    )


def to_result_view(response: models.Response) -> ResultView:
    """Combine one response with the answer key it was scored against.

    Only the given response is included; the assessment part comes from
    the snapshot taken at submission time.
    """
    snapshot = AssessmentSnapshot.model_validate(response.snapshot)
    total = len(snapshot.questions)
    return ResultView(
        response=to_response_out(response),
        total_questions=total,
        passed=is_passing(response.score, total),
        assessment=snapshot,
    )
