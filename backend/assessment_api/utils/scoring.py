"""Scoring of a submitted answer vector against an assessment's answer key.

`score_answers` is a pure function: it compares each answer to the
correct option index at the same position and counts the matches. There
is no partial credit and no negative marking.

Unanswered questions are submitted as `-1`. `validate_submission` rejects
any submission containing one, so a stored response never has an
unanswered question silently scored as wrong.
"""

from typing import Sequence
from ..errors import ValidationError
from ..models import ordered_questions
from ..schemas import ScoreResult

UNANSWERED = -1


def score_answers(assessment, answers: Sequence[int]) -> ScoreResult:
    """Score `answers` against the answer key of `assessment`.

    Raises `ValidationError` when the number of answers differs from the
    number of questions; the caller must reject the submission as a whole.
    """
    questions = ordered_questions(assessment)
    if len(answers) != len(questions):
        raise ValidationError(
            f"answer count mismatch: expected {len(questions)} answers, got {len(answers)}",
            field='answers',
        )
    per_question = [a == q.correct_answer_index for a, q in zip(answers, questions)]
    return ScoreResult(score=sum(per_question), per_question_correct=per_question)


def validate_submission(assessment, answers: Sequence[int]) -> None:
    """Reject submissions that cannot be scored as-is.

    Checks, in order: answer count, unanswered sentinel, option range.
    """
    questions = ordered_questions(assessment)
    if len(answers) != len(questions):
        raise ValidationError(
            f"answer count mismatch: expected {len(questions)} answers, got {len(answers)}",
            field='answers',
        )
    for i, (a, q) in enumerate(zip(answers, questions)):
        if isinstance(a, bool) or not isinstance(a, int):
            raise ValidationError(f"question {i + 1}: answer must be an integer option index", field=f'answers[{i}]')
        if a == UNANSWERED:
            raise ValidationError(f"question {i + 1} is unanswered", field=f'answers[{i}]')
        if not 0 <= a < len(q.options):
            raise ValidationError(
                f"question {i + 1}: option {a} out of range (0..{len(q.options) - 1})",
                field=f'answers[{i}]',
            )


def is_passing(score: int, question_count: int) -> bool:
    """True when `score` is strictly greater than half of `question_count`."""
    return 2 * score > question_count
