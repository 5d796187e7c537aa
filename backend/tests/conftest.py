import os
import tempfile
from pathlib import Path

import pytest

# Point the app at a throwaway SQLite file before `assessment_api` is imported.
_DB_DIR = Path(tempfile.mkdtemp(prefix="assessment-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["ENV"] = "dev"


@pytest.fixture(scope="session")
def client():
    from fastapi.testclient import TestClient
    from assessment_api.main import app
    return TestClient(app)


@pytest.fixture(scope="session")
def admin_headers(client):
    client.post('/auth/register', json={'username': 'owner', 'password': 'owner-pass'})
    r = client.post('/auth/login', json={'username': 'owner', 'password': 'owner-pass'})
    assert r.status_code == 200
    return {'Authorization': f"Bearer {r.json()['access_token']}"}


def sample_payload(keys=(0, 1, 2, 1), title='Networking basics'):
    """Build an import payload with one question per entry in `keys`."""
    return {
        'title': title,
        'description': 'A short quiz',
        'questions': [
            {'text': f'Question {i + 1}?', 'options': ['A', 'B', 'C', 'D'], 'correct_answer_index': k}
            for i, k in enumerate(keys)
        ],
    }


@pytest.fixture
def create_assessment(client, admin_headers):
    def _create(keys=(0, 1, 2, 1), title='Networking basics'):
        r = client.post('/api/assessments', json=sample_payload(keys, title), headers=admin_headers)
        assert r.status_code == 201, r.text
        return r.json()
    return _create


@pytest.fixture
def make_payload():
    return sample_payload
