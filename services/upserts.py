"""
Atomic create-or-update statements keyed on the composite unique constraints.

Each helper issues a single INSERT ... ON CONFLICT DO UPDATE so concurrent
writers for the same key never produce duplicate rows; the last committed
write wins.
"""

from datetime import datetime

from sqlalchemy.dialects import postgresql, sqlite

from extensions import db
from models import Attendance, Submission

_DIALECT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


def _insert(model):
    dialect = db.session.get_bind().dialect.name
    try:
        insert = _DIALECT_INSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"Upserts are not supported on the '{dialect}' dialect")
    return insert(model)


def upsert_attendance(user_id, classroom_id, day, is_present):
    """Create or overwrite the attendance fact for (user, classroom, day)."""
    now = datetime.utcnow()
    stmt = _insert(Attendance).values(
        user_id=user_id,
        classroom_id=classroom_id,
        date=day,
        is_present=is_present,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=['user_id', 'classroom_id', 'date'],
        set_={
            'is_present': stmt.excluded.is_present,
            'updated_at': stmt.excluded.updated_at,
        },
    )
    db.session.execute(stmt)
    return {'userId': user_id, 'classroomId': classroom_id, 'date': day.isoformat(), 'isPresent': is_present}


def upsert_submission(user_id, assignment_id, content, submitted_at=None):
    """
    Store a student's submission, replacing content and submission time on
    resubmit. Existing marks are left untouched.
    """
    submitted_at = submitted_at or datetime.utcnow()
    stmt = _insert(Submission).values(
        user_id=user_id,
        assignment_id=assignment_id,
        content=content,
        submitted_at=submitted_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=['user_id', 'assignment_id'],
        set_={
            'content': stmt.excluded.content,
            'submitted_at': stmt.excluded.submitted_at,
        },
    )
    db.session.execute(stmt)
    return Submission.query.filter_by(user_id=user_id, assignment_id=assignment_id).populate_existing().one()
