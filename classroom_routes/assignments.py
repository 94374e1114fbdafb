"""
Assignment, submission and grading routes.
"""

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from decorators import can_grade
from errors import AuthorizationError, NotFoundError, ValidationError
from extensions import db
from models import Assignment, Membership, Submission
from services.assignments import create_assignment, submit_assignment, grade_submission
from services.storage import save_upload
from services.submission_stats import evaluation_label, is_evaluated, is_late, sort_for_grading
from .utils import (
    get_json_body, get_classroom_or_404, parse_datetime,
    require_classroom_access, require_classroom_manager,
)

bp = Blueprint('assignments', __name__)


def _get_assignment_or_404(classroom, assignment_id):
    assignment = Assignment.query.filter_by(id=assignment_id, classroom_id=classroom.id).first()
    if assignment is None:
        raise NotFoundError('Assignment not found')
    return assignment


def _graded_row(submission):
    row = submission.to_dict()
    user = submission.user
    row.update({
        'user': {
            'id': user.id,
            'firstName': user.first_name,
            'lastName': user.last_name,
            'email': user.email,
            'rollNo': user.roll_no,
        },
        'isLate': is_late(submission.submitted_at, submission.assignment.deadline),
        'isEvaluated': is_evaluated(submission.marks),
        'status': evaluation_label(submission.marks),
    })
    return row


@bp.route('/classrooms/<int:classroom_id>/assignments', methods=['POST'])
@login_required
def post_assignment(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)
    data = get_json_body()

    assignment = create_assignment(
        classroom,
        current_user,
        title=data.get('title'),
        deadline=parse_datetime(data.get('deadline')),
        max_marks=data.get('maxMarks'),
        description=data.get('description'),
        requirements=data.get('requirements'),
    )
    current_app.logger.info(f"User {current_user.id} posted assignment {assignment.id} in classroom {classroom.id}")
    return jsonify(assignment.to_dict()), 201


@bp.route('/classrooms/<int:classroom_id>/assignments', methods=['GET'])
@login_required
def list_assignments(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)
    assignments = Assignment.query.filter_by(classroom_id=classroom.id).order_by(Assignment.deadline.asc()).all()
    return jsonify({'assignments': [a.to_dict() for a in assignments]})


@bp.route('/classrooms/<int:classroom_id>/assignments/<int:assignment_id>', methods=['GET'])
@login_required
def get_assignment(classroom_id, assignment_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)
    assignment = _get_assignment_or_404(classroom, assignment_id)

    payload = assignment.to_dict()
    own = Submission.query.filter_by(assignment_id=assignment.id, user_id=current_user.id).first()
    payload['mySubmission'] = _graded_row(own) if own else None
    return jsonify(payload)


@bp.route('/classrooms/<int:classroom_id>/assignments/<int:assignment_id>', methods=['DELETE'])
@login_required
def delete_assignment(classroom_id, assignment_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)
    assignment = _get_assignment_or_404(classroom, assignment_id)

    db.session.delete(assignment)
    db.session.commit()
    current_app.logger.info(f"User {current_user.id} removed assignment {assignment_id}")
    return jsonify({'success': True, 'message': 'Assignment removed successfully.'})


@bp.route('/classrooms/<int:classroom_id>/assignments/<int:assignment_id>/submit', methods=['POST'])
@login_required
def submit(classroom_id, assignment_id):
    """Multipart upload under 'file', or JSON {"content": <reference>}."""
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)
    assignment = _get_assignment_or_404(classroom, assignment_id)

    if 'file' in request.files:
        # Storage must succeed before the submission row is written
        content = save_upload(request.files['file'], f"submissions/{assignment.id}")
    else:
        content = get_json_body().get('content')

    submission = submit_assignment(current_user, assignment, content)
    return jsonify(_graded_row(submission)), 201


@bp.route('/classrooms/<int:classroom_id>/assignments/<int:assignment_id>/submissions', methods=['GET'])
@login_required
def list_submissions(classroom_id, assignment_id):
    """Grader view: unevaluated first, then by roll number."""
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)
    assignment = _get_assignment_or_404(classroom, assignment_id)

    submissions = sort_for_grading(assignment.submissions)
    return jsonify({'submissions': [_graded_row(s) for s in submissions]})


@bp.route('/classrooms/<int:classroom_id>/submissions', methods=['GET'])
@login_required
def my_submissions(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)

    submissions = (
        Submission.query.join(Assignment)
        .filter(Assignment.classroom_id == classroom.id, Submission.user_id == current_user.id)
        .order_by(Submission.submitted_at.desc())
        .all()
    )
    rows = []
    for submission in submissions:
        row = _graded_row(submission)
        row['assignment'] = {
            'id': submission.assignment.id,
            'title': submission.assignment.title,
            'maxMarks': submission.assignment.max_marks,
        }
        rows.append(row)
    return jsonify({'submissions': rows})


@bp.route('/submissions/<int:submission_id>/marks', methods=['PATCH'])
@login_required
def set_marks(submission_id):
    submission = db.session.get(Submission, submission_id)
    if submission is None:
        raise NotFoundError('Submission not found')

    classroom = submission.assignment.classroom
    if not can_grade(current_user.role, classroom.creator_id == current_user.id):
        raise AuthorizationError('You are not authorized to grade this submission')

    data = get_json_body()
    if 'marks' not in data:
        raise ValidationError('Invalid marks value')
    grade_submission(submission, data['marks'])

    current_app.logger.info(f"User {current_user.id} graded submission {submission_id}: {submission.marks:g}")
    return jsonify({'submission': _graded_row(submission)})


@bp.route('/assignments', methods=['GET'])
@login_required
def my_assignments():
    """Assignments across every classroom the user belongs to, with their own submission state."""
    assignments = (
        Assignment.query.join(Membership, Membership.classroom_id == Assignment.classroom_id)
        .filter(Membership.user_id == current_user.id)
        .order_by(Assignment.deadline.asc())
        .all()
    )
    submissions = {
        s.assignment_id: s
        for s in Submission.query.filter(
            Submission.user_id == current_user.id,
            Submission.assignment_id.in_([a.id for a in assignments]),
        ).all()
    } if assignments else {}

    rows = []
    for assignment in assignments:
        row = assignment.to_dict()
        row['classroom'] = {'id': assignment.classroom.id, 'courseName': assignment.classroom.display_name}
        own = submissions.get(assignment.id)
        row['mySubmission'] = {
            'submittedAt': own.submitted_at.isoformat(),
            'isLate': is_late(own.submitted_at, assignment.deadline),
            'marks': own.marks,
            'status': evaluation_label(own.marks),
        } if own else None
        rows.append(row)
    return jsonify({'assignments': rows})
