"""
Classroom and membership routes.
"""

from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy import or_, select

from decorators import professor_required
from errors import NotFoundError, ValidationError
from extensions import db
from models import Classroom, Membership, Role, User
from services.classrooms import create_classroom, join_classroom
from services.notifications import create_leave_notification
from .utils import (
    get_json_body, get_classroom_or_404, is_creator,
    require_classroom_access, require_classroom_manager,
)

bp = Blueprint('classrooms', __name__)


@bp.route('/classrooms', methods=['POST'])
@login_required
@professor_required
def create():
    data = get_json_body()
    classroom = create_classroom(
        current_user,
        data.get('name'),
        course_code=data.get('courseCode'),
        course_name=data.get('courseName'),
        year=data.get('year'),
        division=data.get('division'),
    )
    current_app.logger.info(f"User {current_user.id} created classroom {classroom.id} ({classroom.code})")
    return jsonify(classroom.to_dict()), 201


@bp.route('/classrooms', methods=['GET'])
@login_required
def list_classrooms():
    """Classrooms the current user created or belongs to."""
    classrooms = (
        Classroom.query.outerjoin(Membership, Membership.classroom_id == Classroom.id)
        .filter(or_(Classroom.creator_id == current_user.id, Membership.user_id == current_user.id))
        .distinct()
        .order_by(Classroom.created_at.desc())
        .all()
    )
    return jsonify({'classrooms': [
        dict(c.to_dict(), isCreator=c.creator_id == current_user.id) for c in classrooms
    ]})


@bp.route('/classrooms/<int:classroom_id>', methods=['GET'])
@login_required
def get_classroom(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)

    creator = classroom.creator
    payload = classroom.to_dict()
    payload.update({
        'creatorFirstName': creator.first_name,
        'creatorLastName': creator.last_name,
        'creatorEmail': creator.email,
    })
    members = [m.user.to_dict() for m in classroom.memberships]
    return jsonify({'classroom': payload, 'members': members})


@bp.route('/classrooms/<int:classroom_id>', methods=['DELETE'])
@login_required
def delete_classroom(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)

    db.session.delete(classroom)
    db.session.commit()
    current_app.logger.info(f"User {current_user.id} deleted classroom {classroom_id}")
    return jsonify({'success': True, 'message': 'Classroom and all associated data deleted successfully'})


@bp.route('/classrooms/join', methods=['POST'])
@login_required
def join():
    data = get_json_body()
    classroom, created = join_classroom(current_user, data.get('code'))
    if classroom is None:
        raise NotFoundError('Classroom not found')
    message = 'Successfully joined the classroom' if created else 'You are already a member of this classroom'
    return jsonify({'message': message, 'classroom': classroom.to_dict()})


@bp.route('/classrooms/<int:classroom_id>/leave', methods=['POST'])
@login_required
def leave(classroom_id):
    """Drop the membership; attendance history is kept."""
    classroom = get_classroom_or_404(classroom_id)
    if is_creator(classroom):
        raise ValidationError('Cannot leave a classroom you created')

    membership = Membership.query.filter_by(user_id=current_user.id, classroom_id=classroom.id).first()
    if membership is None:
        raise NotFoundError('You are not a member of this classroom')

    db.session.delete(membership)
    create_leave_notification(current_user, classroom)
    db.session.commit()
    return jsonify({'message': 'Successfully left the classroom'})


@bp.route('/classrooms/<int:classroom_id>/members', methods=['GET'])
@login_required
def members(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)

    students = (
        User.query.join(Membership, Membership.user_id == User.id)
        .filter(Membership.classroom_id == classroom.id, User.role == Role.STUDENT)
        .order_by(User.roll_no.asc())
        .all()
    )
    return jsonify({'members': [s.to_dict() for s in students]})


@bp.route('/classrooms/invitations', methods=['GET'])
@login_required
def invitations():
    """Classrooms for the user's year and division that they have not joined yet."""
    if not current_user.year or not current_user.division:
        return jsonify({'invitations': []})

    joined = select(Membership.classroom_id).where(Membership.user_id == current_user.id)
    classrooms = (
        Classroom.query
        .filter(
            Classroom.year == current_user.year,
            Classroom.division == current_user.division,
            Classroom.id.notin_(joined),
        )
        .order_by(Classroom.created_at.desc())
        .all()
    )
    return jsonify({'invitations': [
        {
            'id': c.id,
            'code': c.code,
            'courseName': c.course_name,
            'courseCode': c.course_code,
            'year': c.year,
            'division': c.division,
            'professor': {'firstName': c.creator.first_name, 'lastName': c.creator.last_name},
            'memberCount': len(c.memberships),
        }
        for c in classrooms
    ]})
