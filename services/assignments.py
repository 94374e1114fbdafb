"""
Assignment posting, submission and grading.
"""

import logging

from extensions import db
from errors import ValidationError
from models import Assignment, Membership, User
from services.email_service import send_assignment_emails
from services.notifications import create_assignment_notifications, create_grade_notification
from services.upserts import upsert_submission

logger = logging.getLogger(__name__)


def _validate_max_marks(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError('maxMarks must be a positive number')
    return float(value)


def _validate_requirements(value):
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError('requirements must be a list of strings')
    return value


def create_assignment(classroom, creator, title, deadline, max_marks, description=None, requirements=None):
    """
    Post an assignment and notify every other member in the same transaction.
    Emails go out afterwards and cannot undo the post.
    """
    if not title or not title.strip():
        raise ValidationError('Title is required')
    if deadline is None:
        raise ValidationError('Deadline is required')

    assignment = Assignment(
        title=title.strip(),
        description=description,
        requirements=_validate_requirements(requirements),
        deadline=deadline,
        max_marks=_validate_max_marks(max_marks),
        classroom=classroom,
        creator=creator,
    )
    db.session.add(assignment)
    db.session.flush()

    recipients = (
        User.query.join(Membership, Membership.user_id == User.id)
        .filter(Membership.classroom_id == classroom.id, User.id != creator.id)
        .all()
    )
    create_assignment_notifications(assignment, recipients)
    db.session.commit()

    send_assignment_emails(assignment, classroom, recipients)
    return assignment


def submit_assignment(user, assignment, content):
    if not content:
        raise ValidationError('Submission content is required')
    submission = upsert_submission(user.id, assignment.id, content)
    db.session.commit()
    logger.info("User %s submitted assignment %s", user.id, assignment.id)
    return submission


def grade_submission(submission, marks):
    """Record marks and the student's grade notification atomically."""
    if isinstance(marks, bool) or not isinstance(marks, (int, float)) or marks < 0:
        raise ValidationError('Invalid marks value')
    if marks > submission.assignment.max_marks:
        raise ValidationError(f"Marks cannot exceed {submission.assignment.max_marks:g}")

    try:
        submission.marks = float(marks)
        create_grade_notification(submission)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return submission
