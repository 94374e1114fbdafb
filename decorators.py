from functools import wraps

from flask import abort
from flask_login import current_user

from models import Role

CLASSROOM_MANAGER_ROLES = (Role.PROFESSOR, Role.ADMIN)


def can_create_classroom(role):
    """Professors and admins may open new classrooms."""
    return role in CLASSROOM_MANAGER_ROLES


def can_manage_classroom(role, is_creator):
    """Admins manage every classroom; professors only the ones they created."""
    if role == Role.ADMIN:
        return True
    return role == Role.PROFESSOR and bool(is_creator)


def can_grade(role, is_creator):
    return can_manage_classroom(role, is_creator)


def can_view_classroom(role, is_creator, is_member):
    return role == Role.ADMIN or bool(is_creator) or bool(is_member)


def can_administer_users(role):
    return role == Role.ADMIN


def admin_required(f):
    """Restricts access to users with the ADMIN role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not can_administer_users(current_user.role):
            abort(403)
        return f(*args, **kwargs)
    return decorated_function


def professor_required(f):
    """Restricts access to users who may create and run classrooms."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not can_create_classroom(current_user.role):
            abort(403)
        return f(*args, **kwargs)
    return decorated_function
