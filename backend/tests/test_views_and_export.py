import csv
import io
from datetime import datetime, timezone

from assessment_api import models
from assessment_api.utils.export import export_filename, responses_to_csv
from assessment_api.utils.views import to_owner_view, to_public_view, to_result_view, to_snapshot


def _assessment():
    # positions deliberately out of order to check sorting
    return models.Assessment(
        id=7,
        title='Geography',
        description='Capitals',
        questions=[
            models.Question(position=1, text='Capital of Spain?', options=['Madrid', 'Rome'], correct_answer_index=0),
            models.Question(position=0, text='Capital of Italy?', options=['Madrid', 'Rome'], correct_answer_index=1),
        ],
    )


def test_public_view_has_no_answer_key():
    view = to_public_view(_assessment())
    assert [q.text for q in view.questions] == ['Capital of Italy?', 'Capital of Spain?']
    dumped = view.model_dump_json()
    assert 'correct_answer_index' not in dumped
    assert all('correct_answer_index' not in q for q in view.model_dump()['questions'])


def test_owner_view_keeps_answer_key():
    view = to_owner_view(_assessment())
    assert [q.correct_answer_index for q in view.questions] == [1, 0]
    assert view.title == 'Geography'


def test_result_view_uses_snapshot():
    a = _assessment()
    response = models.Response(
        id=3,
        assessment_id=7,
        assessment_version=1,
        name='Ann',
        email='ann@example.com',
        answers=[1, 1],
        score=1,
        snapshot=to_snapshot(a).model_dump(),
    )
    view = to_result_view(response)
    assert view.total_questions == 2
    assert view.passed is False
    assert view.assessment.questions[0].correct_answer_index == 1
    assert view.response.name == 'Ann'


def test_csv_quotes_every_field():
    submitted = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    rows = [
        models.Response(assessment_id=1, assessment_version=1, name='Smith, Jo', email='jo@example.com',
                        answers=[0], score=1, submitted_at=submitted),
    ]
    text = responses_to_csv(rows)
    lines = text.splitlines()
    assert lines[0] == '"name","email","score","submitted_at"'
    assert lines[1].startswith('"Smith, Jo","jo@example.com","1",')
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[1][0] == 'Smith, Jo'
    assert parsed[1][3] == submitted.isoformat()


def test_export_filename_is_header_safe():
    assert export_filename('Final "exam" 2024') == 'Final-exam-2024-results.csv'
    assert export_filename('!!!') == 'assessment-results.csv'
