"""CLI script to import an assessment JSON file into the backend DB.
Usage: python scripts/import_assessment.py path/to/assessment.json [--dry-run]
"""
import sys
import argparse
import pathlib
# Ensure `backend/` is on sys.path so package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from assessment_api.database import engine, create_db_and_tables
from assessment_api.errors import AssessmentError
from assessment_api import services
from assessment_api.utils.importer import parse_import_file


def main(path: pathlib.Path, dry_run: bool = False) -> int:
    """Validate `path` and, unless `dry_run`, persist it as a new assessment.

    Returns a process exit code; problems are printed to stderr.
    """
    if not path.exists():
        print(f'File not found: {path}', file=sys.stderr)
        return 1
    try:
        draft = parse_import_file(path.read_bytes())
    except AssessmentError as e:
        print(f'Invalid assessment: {e.message}', file=sys.stderr)
        return 1
    if dry_run:
        print(f'Valid: "{draft.title}" with {len(draft.questions)} questions (not imported)')
        return 0
    create_db_and_tables()
    with Session(engine) as session:
        try:
            created = services.AssessmentService(session).create_from_draft(draft)
        except AssessmentError as e:
            print(f'Import failed: {e.message}', file=sys.stderr)
            return 1
        print(f'Imported assessment {created.id}: "{created.title}" with {len(draft.questions)} questions')
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('path', type=pathlib.Path, help='JSON file with {title, description, questions}')
    parser.add_argument('--dry-run', action='store_true', help='Validate only, do not write to the database')
    args = parser.parse_args()
    sys.exit(main(args.path, dry_run=args.dry_run))
