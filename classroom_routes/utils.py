"""
Shared helpers for the classroom API routes.
"""

from datetime import datetime, timezone

from flask import request, current_app
from flask_login import current_user

from decorators import can_manage_classroom, can_view_classroom
from errors import AuthorizationError, NotFoundError, ValidationError
from extensions import db
from models import Classroom
from services.classrooms import is_member


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def get_auth_identity():
    """The user id forwarded by the upstream auth provider, if any."""
    return request.headers.get(current_app.config['AUTH_USER_HEADER'])


def get_classroom_or_404(classroom_id):
    classroom = db.session.get(Classroom, classroom_id)
    if classroom is None:
        raise NotFoundError('Classroom not found')
    return classroom


def is_creator(classroom):
    return classroom.creator_id == current_user.id


def require_classroom_access(classroom):
    """Creator, member or admin."""
    if not can_view_classroom(current_user.role, is_creator(classroom), is_member(current_user.id, classroom.id)):
        raise AuthorizationError('You are not a member of this classroom')


def require_classroom_manager(classroom):
    if not can_manage_classroom(current_user.role, is_creator(classroom)):
        raise AuthorizationError('You are not authorized to manage this classroom')


def parse_datetime(value, field='deadline'):
    """ISO-8601 string to a naive UTC datetime."""
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field} is required")
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def get_page_arg(name='page'):
    page = request.args.get(name, 1, type=int)
    return page if page and page > 0 else 1
