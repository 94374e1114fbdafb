"""
Recent activity feed for the signed-in user.
"""

from datetime import datetime, timedelta

from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from models import Attendance, Submission
from services.submission_stats import is_evaluated, is_late

bp = Blueprint('activities', __name__)

WINDOW_DAYS = 7
FEED_SIZE = 10


def _attendance_item(record):
    course = record.classroom.display_name
    return {
        'id': record.id,
        'type': 'attendance',
        'title': f"{'Attended' if record.is_present else 'Missed'} {course}",
        'date': record.date.isoformat(),
        'details': {
            'classroomName': course,
            'status': 'present' if record.is_present else 'absent',
        },
    }


def _submission_item(submission):
    assignment = submission.assignment
    graded = is_evaluated(submission.marks)
    return {
        'id': submission.id,
        'type': 'grade' if graded else 'submission',
        'title': f"Received grade for {assignment.title}" if graded else f"Submitted {assignment.title}",
        'date': submission.submitted_at.isoformat(),
        'details': {
            'classroomName': assignment.classroom.display_name,
            'grade': submission.marks,
            'maxGrade': assignment.max_marks,
            'submissionStatus': 'late' if is_late(submission.submitted_at, assignment.deadline) else 'on_time',
        },
    }


@bp.route('/activities', methods=['GET'])
@login_required
def recent_activities():
    """Attendance and submissions from the last week, newest first."""
    since = datetime.utcnow() - timedelta(days=WINDOW_DAYS)

    attendances = (
        Attendance.query.filter(Attendance.user_id == current_user.id, Attendance.date >= since.date())
        .order_by(Attendance.date.desc())
        .limit(FEED_SIZE)
        .all()
    )
    submissions = (
        Submission.query.filter(Submission.user_id == current_user.id, Submission.submitted_at >= since)
        .order_by(Submission.submitted_at.desc())
        .limit(FEED_SIZE)
        .all()
    )

    # Calendar days sort as midnight of that day
    timed = [(datetime.combine(a.date, datetime.min.time()), _attendance_item(a)) for a in attendances]
    timed += [(s.submitted_at, _submission_item(s)) for s in submissions]
    timed.sort(key=lambda pair: pair[0], reverse=True)
    return jsonify({'activities': [item for _, item in timed[:FEED_SIZE]]})
