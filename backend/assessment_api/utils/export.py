"""CSV export of the responses to one assessment."""

import csv
import io
import re
from typing import Iterable

EXPORT_COLUMNS = ('name', 'email', 'score', 'submitted_at')


def responses_to_csv(responses: Iterable) -> str:
    """Render one quoted row per response under a fixed header."""
    sio = io.StringIO()
    writer = csv.writer(sio, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(EXPORT_COLUMNS)
    for r in responses:
        writer.writerow([r.name, r.email, r.score, r.submitted_at.isoformat()])
    return sio.getvalue()


def export_filename(title: str) -> str:
    """Return a header-safe `<title>-results.csv` file name."""
    slug = re.sub(r'[^A-Za-z0-9._-]+', '-', title).strip('-') or 'assessment'
    return f'{slug}-results.csv'
