"""
Notification fan-out helpers. Callers own the transaction: these functions
only add rows to the session so the notification commits (or rolls back)
together with the state change that triggered it.
"""

from extensions import db
from models import Notification, NotificationType, User
from errors import NotFoundError


def format_day(day):
    """March 1, 2024"""
    return f"{day:%B} {day.day}, {day.year}"


def create_notification(recipients, notification_type, message, related_id=None):
    """Add one notification addressed to the given users."""
    notification = Notification(
        message=message,
        type=notification_type,
        related_id=str(related_id) if related_id is not None else None,
    )
    notification.recipients.extend(recipients)
    db.session.add(notification)
    return notification


def create_notifications_for_users(users, notification_type, message, related_id=None):
    """Fan out: one notification row per recipient."""
    return [
        create_notification([user], notification_type, message, related_id)
        for user in users
    ]


def create_attendance_notification(user_id, classroom, day, is_present):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    status = 'present' if is_present else 'absent'
    message = f"Your attendance for {classroom.display_name} on {format_day(day)} was marked as {status}."
    return create_notification([user], NotificationType.ATTENDANCE, message, classroom.id)


def create_grade_notification(submission):
    assignment = submission.assignment
    classroom = assignment.classroom
    message = (
        f"Your submission for '{assignment.title}' in {classroom.display_name} "
        f"has been graded: {submission.marks:g}/{assignment.max_marks:g}."
    )
    return create_notification([submission.user], NotificationType.ASSIGNMENT, message, assignment.id)


def create_assignment_notifications(assignment, recipients):
    classroom = assignment.classroom
    message = (
        f"New assignment '{assignment.title}' posted in {classroom.display_name}, "
        f"due {format_day(assignment.deadline)}."
    )
    return create_notifications_for_users(recipients, NotificationType.ASSIGNMENT, message, assignment.id)


def create_resource_notifications(resource, recipients):
    classroom = resource.classroom
    message = f"New resource '{resource.title}' shared in {classroom.display_name}."
    return create_notifications_for_users(recipients, NotificationType.RESOURCE, message, resource.id)


def create_leave_notification(user, classroom):
    return create_notification([user], NotificationType.MEMBERSHIP, f"You left {classroom.display_name}", classroom.id)


def user_notifications_query(user_id):
    return Notification.query.filter(Notification.recipients.any(User.id == user_id))


def mark_notification_read(notification_id, user_id):
    """Idempotent: marking an already-read notification is a no-op."""
    notification = user_notifications_query(user_id).filter(Notification.id == notification_id).first()
    if notification is None:
        raise NotFoundError('Notification not found')
    if not notification.is_read:
        notification.is_read = True
    db.session.commit()
    return notification


def mark_all_notifications_read(user_id):
    """Mark every unread notification addressed to the user; returns how many changed."""
    unread = user_notifications_query(user_id).filter(Notification.is_read.is_(False)).all()
    for notification in unread:
        notification.is_read = True
    db.session.commit()
    return len(unread)
