"""Summary statistics over the responses to one assessment.

Stored scores are averaged as-is. Pass rate and per-question accuracy
use the assessment's current question list; a response recorded against
an older, shorter version is only counted for the positions it has.
"""

from typing import Sequence
from ..schemas import Summary
from .scoring import is_passing
from ..models import ordered_questions


def aggregate(assessment, responses: Sequence) -> Summary:
    """Compute count, mean score, pass rate and per-question accuracy.

    An empty `responses` yields zeros everywhere rather than dividing by
    zero. Accuracy for question `i` is the share of responses covering
    position `i` whose answer matches the current key; if no response
    covers it the accuracy is 0.0.
    """
    questions = ordered_questions(assessment)
    question_count = len(questions)
    count = len(responses)
    if count == 0:
        return Summary(count=0, average_score=0.0, pass_rate=0.0, per_question_accuracy=[0.0] * question_count)

    total_score = sum(r.score for r in responses)
    passing = sum(1 for r in responses if is_passing(r.score, question_count))

    correct = [0] * question_count
    seen = [0] * question_count
    for r in responses:
        for i, q in enumerate(questions[:len(r.answers)]):
            seen[i] += 1
            if r.answers[i] == q.correct_answer_index:
                correct[i] += 1
    accuracy = [(c / s) if s else 0.0 for c, s in zip(correct, seen)]

    return Summary(
        count=count,
        average_score=total_score / count,
        pass_rate=passing / count,
        per_question_accuracy=accuracy,
    )
