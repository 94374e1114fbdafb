"""
Account routes: first sign-in sync, self-service settings and admin edits.
"""

from flask import Blueprint, jsonify, abort, request, current_app
from flask_login import login_required, current_user

from decorators import admin_required
from errors import NotFoundError, ValidationError
from extensions import db
from models import Assignment, Notification, Resource, Role, User
from .utils import get_json_body, get_auth_identity

bp = Blueprint('users', __name__)

SELF_SERVICE_FIELDS = {
    'rollNo': 'roll_no',
    'year': 'year',
    'division': 'division',
    'srn': 'srn',
    'prn': 'prn',
    'officeHours': 'office_hours',
}

PROFILE_FIELDS = {
    'email': 'email',
    'firstName': 'first_name',
    'lastName': 'last_name',
}


def _apply_fields(user, data, fields):
    for key, attribute in fields.items():
        if key in data:
            setattr(user, attribute, data[key])


@bp.route('/user/sync', methods=['POST'])
def sync_user():
    """Create the account on first sign-in, refresh profile fields afterwards."""
    user_id = get_auth_identity()
    if not user_id:
        abort(401)
    data = get_json_body()

    user = db.session.get(User, user_id)
    created = user is None
    if created:
        user = User(id=user_id, role=Role.STUDENT)
        db.session.add(user)
    _apply_fields(user, data, PROFILE_FIELDS)
    db.session.commit()

    if created:
        current_app.logger.info(f"Created user {user_id} on first sign-in")
    return jsonify(user.to_dict()), 201 if created else 200


@bp.route('/user', methods=['GET'])
@login_required
def get_user():
    return jsonify(current_user.to_dict())


@bp.route('/user', methods=['PUT'])
@login_required
def update_user():
    data = get_json_body()
    _apply_fields(current_user, data, SELF_SERVICE_FIELDS)
    db.session.commit()
    return jsonify(current_user.to_dict())


@bp.route('/admin/users', methods=['GET'])
@login_required
@admin_required
def admin_list_users():
    """Every account with its memberships and submissions; optional ?role= filter."""
    query = User.query
    role = request.args.get('role')
    if role:
        try:
            query = query.filter(User.role == Role(role.upper()))
        except ValueError:
            raise ValidationError(f"Invalid role: {role}")

    users = []
    for user in query.order_by(User.created_at.asc()).all():
        row = user.to_dict()
        row['memberships'] = [
            {'classroomId': m.classroom_id, 'name': m.classroom.name, 'courseCode': m.classroom.course_code}
            for m in user.memberships
        ]
        row['submissions'] = [
            {
                'id': s.id,
                'assignmentId': s.assignment_id,
                'assignmentTitle': s.assignment.title,
                'marks': s.marks,
                'maxMarks': s.assignment.max_marks,
                'submittedAt': s.submitted_at.isoformat(),
            }
            for s in user.submissions
        ]
        row['classroomsCreated'] = len(user.created_classrooms)
        users.append(row)
    return jsonify({'users': users})


@bp.route('/admin/users/<user_id>', methods=['PUT'])
@login_required
@admin_required
def admin_update_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found')
    data = get_json_body()

    if 'role' in data:
        try:
            user.role = Role(data['role'])
        except ValueError:
            raise ValidationError(f"Invalid role: {data['role']}")
    _apply_fields(user, data, PROFILE_FIELDS)
    _apply_fields(user, data, SELF_SERVICE_FIELDS)
    db.session.commit()

    current_app.logger.info(f"Admin {current_user.id} updated user {user_id}")
    return jsonify(user.to_dict())


@bp.route('/admin/users/<user_id>', methods=['DELETE'])
@login_required
@admin_required
def admin_delete_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found')
    if user.id == current_user.id:
        raise ValidationError('You cannot delete your own account')
    if user.created_classrooms or Assignment.query.filter_by(creator_id=user.id).first() \
            or Resource.query.filter_by(uploaded_by=user.id).first():
        raise ValidationError('Reassign or delete the content this user created first')

    # Notifications addressed only to this user would be left with no recipients
    orphaned = [n.id for n in user.notifications if len(n.recipients) == 1]
    db.session.delete(user)
    db.session.flush()
    if orphaned:
        Notification.query.filter(Notification.id.in_(orphaned)).delete(synchronize_session=False)
    db.session.commit()
    current_app.logger.info(f"Admin {current_user.id} deleted user {user_id} and {len(orphaned)} notification(s)")
    return jsonify({'success': True, 'message': 'User deleted'})
