import importlib.util
import json
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from assessment_api import models, repositories
from assessment_api.database import create_db_and_tables, engine
from assessment_api.errors import PersistenceError


def _load_script():
    path = Path(__file__).resolve().parents[1] / 'scripts' / 'import_assessment.py'
    spec = importlib.util.spec_from_file_location('import_assessment', path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_commit_failure_becomes_persistence_error(monkeypatch):
    create_db_and_tables()
    with Session(engine) as session:
        def boom():
            raise OperationalError('INSERT', {}, Exception('database is locked'))
        monkeypatch.setattr(session, 'commit', boom)
        repo = repositories.ResponseRepository(session)
        response = models.Response(assessment_id=1, assessment_version=1, name='a', email='b', answers=[0], score=0)
        with pytest.raises(PersistenceError) as exc:
            repo.create(response)
        assert exc.value.status_code == 500


def test_import_script_dry_run_and_import(tmp_path, capsys):
    script = _load_script()
    doc = {
        'title': 'From CLI',
        'description': 'Imported by script',
        'questions': [{'text': 'Q', 'options': ['a', 'b'], 'correctAnswerIndex': 0}],
    }
    path = tmp_path / 'quiz.json'
    path.write_text(json.dumps(doc), encoding='utf-8')

    assert script.main(path, dry_run=True) == 0
    assert 'not imported' in capsys.readouterr().out

    assert script.main(path) == 0
    assert 'Imported assessment' in capsys.readouterr().out


def test_import_script_reports_invalid_file(tmp_path, capsys):
    script = _load_script()
    path = tmp_path / 'bad.json'
    path.write_text(json.dumps({'title': 'x', 'description': 'y', 'questions': []}), encoding='utf-8')
    assert script.main(path) == 1
    assert 'questions must be a non-empty list' in capsys.readouterr().err
    assert script.main(tmp_path / 'missing.json') == 1


def test_read_failure_rolls_back_and_becomes_persistence_error(monkeypatch):
    create_db_and_tables()
    with Session(engine) as session:
        calls = []

        def boom(*_args, **_kwargs):
            raise OperationalError('SELECT', {}, Exception('database is locked'))
        monkeypatch.setattr(session, 'get', boom)
        monkeypatch.setattr(session, 'rollback', lambda: calls.append('rollback'))
        with pytest.raises(PersistenceError):
            repositories.AssessmentRepository(session).get(1)
        with pytest.raises(PersistenceError):
            repositories.ResponseRepository(session).get(1)
        assert calls == ['rollback', 'rollback']
