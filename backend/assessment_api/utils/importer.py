"""Validation of untyped assessment payloads (JSON import, create, update).

`validate_import` walks the raw structure field by field, stopping at
the first problem, and only then builds a typed `AssessmentDraft`.
Text must be non-blank but is kept exactly as sent. Server-owned fields (`id`, `created_at`, `version`) in the payload are
ignored.
"""

import json
from typing import Any
from ..errors import ValidationError
from ..schemas import AssessmentDraft, OwnerQuestion


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_int(value: Any) -> bool:
    # bool is a subclass of int; `true` is not an option index
    return isinstance(value, int) and not isinstance(value, bool)


def validate_import(raw: Any) -> AssessmentDraft:
    """Validate `raw` and return a draft ready to be persisted.

    Checks, in order: title, description, questions list, then for each
    question its text, options and correct answer index. Raises
    `ValidationError` naming the failing field.
    """
    if not isinstance(raw, dict):
        raise ValidationError('assessment must be a JSON object')
    if not _non_empty_str(raw.get('title')):
        raise ValidationError('title is required', field='title')
    if not _non_empty_str(raw.get('description')):
        raise ValidationError('description is required', field='description')
    questions = raw.get('questions')
    if not isinstance(questions, list) or not questions:
        raise ValidationError('questions must be a non-empty list', field='questions')

    parsed = []
    for i, q in enumerate(questions):
        where = f'questions[{i}]'
        label = f'question {i + 1}'
        if not isinstance(q, dict):
            raise ValidationError(f'{label} must be an object', field=where)
        if not _non_empty_str(q.get('text')):
            raise ValidationError(f'{label}: text is required', field=f'{where}.text')
        options = q.get('options')
        if not isinstance(options, list) or len(options) < 2:
            raise ValidationError(f'{label}: at least 2 options are required', field=f'{where}.options')
        for j, opt in enumerate(options):
            if not _non_empty_str(opt):
                raise ValidationError(f'{label}: option {j + 1} must be non-empty text', field=f'{where}.options[{j}]')
        key = q['correct_answer_index'] if 'correct_answer_index' in q else q.get('correctAnswerIndex')
        if not _is_int(key):
            raise ValidationError(f'{label}: correct_answer_index must be an integer', field=f'{where}.correct_answer_index')
        if not 0 <= key < len(options):
            raise ValidationError(
                f'{label}: correct_answer_index {key} out of range (0..{len(options) - 1})',
                field=f'{where}.correct_answer_index',
            )
        parsed.append(OwnerQuestion(text=q['text'], options=list(options), correct_answer_index=key))

    return AssessmentDraft(title=raw['title'], description=raw['description'], questions=parsed)


def parse_import_file(file_bytes: bytes) -> AssessmentDraft:
    """Decode an uploaded JSON document and validate it."""
    try:
        data = json.loads(file_bytes.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f'invalid JSON: {e}')
    return validate_import(data)
