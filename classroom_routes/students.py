"""
Student profile and dashboard routes. All figures are recomputed from the
full attendance and submission history on every request.
"""

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from errors import AuthorizationError, NotFoundError
from extensions import db
from models import Attendance, Classroom, Membership, Role, Submission, User
from services.attendance_stats import courses_needing_attention, summarize_attendance
from services.submission_stats import (
    evaluation_label, is_evaluated, is_late, performance_band, summarize_submissions,
)
from .utils import get_page_arg

bp = Blueprint('students', __name__)


def _can_view_student(student):
    if current_user.id == student.id or current_user.role == Role.ADMIN:
        return True
    if current_user.role != Role.PROFESSOR:
        return False
    # Professors see students enrolled in a classroom they created
    return (
        Membership.query.join(Classroom)
        .filter(Membership.user_id == student.id, Classroom.creator_id == current_user.id)
        .first()
        is not None
    )


def _classroom_labels(classroom_ids):
    if not classroom_ids:
        return {}
    classrooms = Classroom.query.filter(Classroom.id.in_(classroom_ids)).all()
    return {c.id: c for c in classrooms}


def _academic_summary(user_id):
    records = Attendance.query.filter_by(user_id=user_id).all()
    attendance = summarize_attendance(records, _classroom_labels({r.classroom_id for r in records}))
    attendance['needsAttention'] = courses_needing_attention(attendance['byClassroom'])

    submissions = Submission.query.filter_by(user_id=user_id).order_by(Submission.submitted_at.desc()).all()
    return attendance, submissions, summarize_submissions(submissions)


def _submission_row(submission):
    assignment = submission.assignment
    classroom = assignment.classroom
    percentage = submission.marks / assignment.max_marks * 100 if is_evaluated(submission.marks) else None
    row = submission.to_dict()
    row.update({
        'isLate': is_late(submission.submitted_at, assignment.deadline),
        'status': evaluation_label(submission.marks),
        'percentage': percentage,
        'band': performance_band(percentage) if percentage is not None else None,
        'assignment': {
            'title': assignment.title,
            'maxMarks': assignment.max_marks,
            'deadline': assignment.deadline.isoformat(),
            'classroom': {'name': classroom.name, 'courseCode': classroom.course_code},
        },
    })
    return row


@bp.route('/students/<student_id>', methods=['GET'])
@login_required
def student_profile(student_id):
    student = db.session.get(User, student_id)
    if student is None:
        raise NotFoundError('Student not found')
    if not _can_view_student(student):
        raise AuthorizationError('You do not have access to this student')

    attendance, submissions, performance = _academic_summary(student.id)

    page = get_page_arg()
    classroom_filter = request.args.get('classroomId', type=int)
    records_query = Attendance.query.filter_by(user_id=student.id)
    if classroom_filter:
        records_query = records_query.filter_by(classroom_id=classroom_filter)
    records_page = records_query.order_by(Attendance.date.desc()).paginate(
        page=page, per_page=current_app.config['STUDENT_ATTENDANCE_PAGE_SIZE'], error_out=False
    )

    attendance['records'] = {
        'data': [
            dict(r.to_dict(), classroom={'id': r.classroom.id, 'name': r.classroom.name, 'courseCode': r.classroom.course_code})
            for r in records_page.items
        ],
        'page': records_page.page,
        'pages': records_page.pages,
        'total': records_page.total,
    }

    profile = student.to_dict()
    profile.update({
        'performance': {'submissions': performance},
        'attendance': attendance,
        'memberships': [
            {'classroom': {'id': m.classroom.id, 'name': m.classroom.name, 'courseCode': m.classroom.course_code}}
            for m in student.memberships
        ],
        'submissions': [_submission_row(s) for s in submissions],
    })
    return jsonify(profile)


@bp.route('/dashboard', methods=['GET'])
@login_required
def dashboard():
    """Headline figures for the signed-in user."""
    attendance, _, performance = _academic_summary(current_user.id)
    return jsonify({
        'user': current_user.to_dict(),
        'attendance': {
            'overall': attendance['overall'],
            'byClassroom': attendance['byClassroom'],
            'needsAttention': attendance['needsAttention'],
        },
        'performance': performance,
        'classrooms': len(current_user.memberships),
    })
