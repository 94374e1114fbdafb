"""
Batched attendance writes.

A roster of presence decisions for one classroom and one day is written in
fixed-size chunks. Every chunk is its own transaction holding the attendance
upserts and one ATTENDANCE notification per student, so a reader never sees
half a chunk. Chunks are independent: when one fails it is rolled back, the
chunks before it stay committed and the chunks after it are never attempted.
"""

import logging
import time
from datetime import date, datetime

from sqlalchemy import text

from extensions import db
from errors import BatchWriteError, ChunkTimeoutError, ValidationError
from services.notifications import create_attendance_notification
from services.upserts import upsert_attendance

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10
DEFAULT_TIMEOUT_MS = 10000
VALID_STATUSES = ('present', 'absent')


def parse_calendar_date(value):
    """
    Reduce an ISO date or datetime string to its calendar day so it can be
    used as part of the attendance key.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError('Date is required')
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def normalize_updates(updates):
    """Validate the update list and return (user_id, is_present) pairs in order."""
    if not updates or not isinstance(updates, list):
        raise ValidationError('Date and valid updates array are required')

    normalized = []
    for position, update in enumerate(updates):
        if not isinstance(update, dict):
            raise ValidationError(f"Update #{position} must be an object")
        user_id = update.get('userId')
        status = update.get('status')
        if not user_id or not isinstance(user_id, str):
            raise ValidationError(f"Update #{position} is missing userId")
        if status not in VALID_STATUSES:
            raise ValidationError(f"Update #{position} has invalid status '{status}'")
        normalized.append((user_id, status == 'present'))
    return normalized


def chunked(items, size):
    if size < 1:
        raise ValueError('chunk size must be positive')
    return [items[start:start + size] for start in range(0, len(items), size)]


class BatchAttendanceWriter:
    """
    Writes a day's attendance for one classroom in independent chunks.

    Every chunk has ``timeout_ms`` to reach its commit. On PostgreSQL each
    statement is also capped at that budget; the whole-chunk deadline is
    checked before committing so a chunk made of many slow statements is
    rolled back instead of committed late.
    """

    def __init__(self, chunk_size=DEFAULT_CHUNK_SIZE, timeout_ms=DEFAULT_TIMEOUT_MS, clock=time.monotonic):
        self.chunk_size = chunk_size
        self.timeout_ms = timeout_ms
        self.clock = clock

    @classmethod
    def from_config(cls, config):
        return cls(
            chunk_size=config.get('ATTENDANCE_CHUNK_SIZE', DEFAULT_CHUNK_SIZE),
            timeout_ms=config.get('ATTENDANCE_CHUNK_TIMEOUT_MS', DEFAULT_TIMEOUT_MS),
        )

    def write(self, classroom, date_value, updates):
        """
        Validate, then persist chunk by chunk. Returns the per-chunk results;
        raises BatchWriteError carrying the committed results if a chunk fails.
        """
        if not date_value:
            raise ValidationError('Date and valid updates array are required')
        day = parse_calendar_date(date_value)
        pairs = normalize_updates(updates)
        chunks = chunked(pairs, self.chunk_size)

        logger.info(
            "Writing attendance for classroom %s on %s: %d updates in %d chunks",
            classroom.id, day.isoformat(), len(pairs), len(chunks),
        )

        results = []
        for index, chunk in enumerate(chunks):
            try:
                results.append(self._write_chunk(classroom, day, index, chunk))
            except Exception as exc:
                db.session.rollback()
                logger.error(
                    "Attendance chunk %d/%d for classroom %s failed; %d chunk(s) remain committed",
                    index + 1, len(chunks), classroom.id, len(results), exc_info=True,
                )
                raise BatchWriteError(failed_chunk=index, committed=results, cause=exc) from exc
        return results

    def _write_chunk(self, classroom, day, index, chunk):
        started = self.clock()
        self._apply_timeout()
        records = [
            upsert_attendance(user_id, classroom.id, day, is_present)
            for user_id, is_present in chunk
        ]
        for user_id, is_present in chunk:
            create_attendance_notification(user_id, classroom, day, is_present)
        db.session.flush()
        self._check_deadline(started, index)
        db.session.commit()
        logger.debug("Committed attendance chunk %d (%d records)", index + 1, len(records))
        return {
            'chunk': index,
            'count': len(records),
            'notifications': len(chunk),
            'records': records,
        }

    def _apply_timeout(self):
        """Cap each statement of the chunk's transaction where the backend supports it."""
        if db.session.get_bind().dialect.name == 'postgresql':
            db.session.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout_ms)}"))

    def _check_deadline(self, started, index):
        elapsed_ms = (self.clock() - started) * 1000
        if elapsed_ms > self.timeout_ms:
            raise ChunkTimeoutError(
                f"Attendance chunk {index + 1} took {elapsed_ms:.0f} ms (limit {self.timeout_ms} ms)"
            )
