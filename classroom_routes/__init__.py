"""
Classroom API routes.

One module per functional area, each with its own blueprint registered on the
parent api_blueprint, which create_app() mounts under /api.
"""

from flask import Blueprint

api_blueprint = Blueprint('api', __name__)

from . import (  # noqa: E402
    users,
    classrooms,
    assignments,
    attendance,
    students,
    resources,
    notifications,
    activities,
)

api_blueprint.register_blueprint(users.bp, url_prefix='')
api_blueprint.register_blueprint(classrooms.bp, url_prefix='')
api_blueprint.register_blueprint(assignments.bp, url_prefix='')
api_blueprint.register_blueprint(attendance.bp, url_prefix='')
api_blueprint.register_blueprint(students.bp, url_prefix='')
api_blueprint.register_blueprint(resources.bp, url_prefix='')
api_blueprint.register_blueprint(notifications.bp, url_prefix='')
api_blueprint.register_blueprint(activities.bp, url_prefix='')
