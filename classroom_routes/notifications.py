"""
In-app notification read surface.
"""

from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from models import Notification
from services.notifications import (
    mark_all_notifications_read, mark_notification_read, user_notifications_query,
)

bp = Blueprint('notifications', __name__)


@bp.route('/notifications', methods=['GET'])
@login_required
def list_notifications():
    notifications = user_notifications_query(current_user.id).order_by(Notification.created_at.desc()).all()
    return jsonify({'notifications': [n.to_dict() for n in notifications]})


@bp.route('/notifications/<int:notification_id>/read', methods=['POST'])
@login_required
def read_notification(notification_id):
    mark_notification_read(notification_id, current_user.id)
    return jsonify({'success': True})


@bp.route('/notifications/read-all', methods=['POST'])
@login_required
def read_all_notifications():
    updated = mark_all_notifications_read(current_user.id)
    return jsonify({'success': True, 'updated': updated})
