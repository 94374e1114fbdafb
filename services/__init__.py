"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .attendance_stats import (
    attendance_percentage,
    attendance_standing,
    classes_needed,
    summarize_attendance,
    courses_needing_attention,
)
from .submission_stats import (
    is_late,
    is_evaluated,
    summarize_submissions,
    sort_for_grading,
)
from .batch_attendance import BatchAttendanceWriter, parse_calendar_date
from .notifications import (
    create_notification,
    create_notifications_for_users,
    mark_notification_read,
    mark_all_notifications_read,
)

__all__ = [
    'attendance_percentage',
    'attendance_standing',
    'classes_needed',
    'summarize_attendance',
    'courses_needing_attention',
    'is_late',
    'is_evaluated',
    'summarize_submissions',
    'sort_for_grading',
    'BatchAttendanceWriter',
    'parse_calendar_date',
    'create_notification',
    'create_notifications_for_users',
    'mark_notification_read',
    'mark_all_notifications_read',
]
