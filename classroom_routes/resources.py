"""
Shared classroom resources.
"""

import io
import os
import zipfile

from flask import Blueprint, jsonify, request, send_file, current_app
from flask_login import login_required, current_user
from werkzeug.utils import secure_filename

from errors import NotFoundError, ValidationError
from extensions import db
from models import Membership, Resource, User
from services.notifications import create_resource_notifications
from services.storage import delete_upload, save_upload, stored_path
from .utils import get_classroom_or_404, require_classroom_access, require_classroom_manager

bp = Blueprint('resources', __name__)

UNCATEGORIZED = 'Uncategorized'


@bp.route('/classrooms/<int:classroom_id>/resources', methods=['GET'])
@login_required
def list_resources(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)

    query = Resource.query.filter_by(classroom_id=classroom.id)
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    resources = query.order_by(Resource.uploaded_at.desc()).all()
    return jsonify({'resources': [r.to_dict() for r in resources]})


@bp.route('/classrooms/<int:classroom_id>/resources', methods=['POST'])
@login_required
def upload_resource(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)

    file = request.files.get('file')
    if file is None:
        raise ValidationError('No file uploaded')
    url = save_upload(file, f"resources/{classroom.id}")

    resource = Resource(
        title=(request.form.get('title') or file.filename).strip(),
        category=request.form.get('category') or None,
        url=url,
        classroom=classroom,
        uploaded_by=current_user.id,
    )
    db.session.add(resource)
    db.session.flush()

    recipients = (
        User.query.join(Membership, Membership.user_id == User.id)
        .filter(Membership.classroom_id == classroom.id, User.id != current_user.id)
        .all()
    )
    create_resource_notifications(resource, recipients)
    db.session.commit()

    current_app.logger.info(f"User {current_user.id} shared resource {resource.id} in classroom {classroom.id}")
    return jsonify(resource.to_dict()), 201


@bp.route('/classrooms/<int:classroom_id>/resources/<int:resource_id>', methods=['DELETE'])
@login_required
def delete_resource(classroom_id, resource_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)

    resource = Resource.query.filter_by(id=resource_id, classroom_id=classroom.id).first()
    if resource is None:
        raise NotFoundError('Resource not found')

    url = resource.url
    db.session.delete(resource)
    db.session.commit()
    delete_upload(url)
    return jsonify({'success': True})


def _archive_name(resource, used):
    """title.ext, made filesystem-safe and unique within the archive."""
    extension = resource.url.rsplit('.', 1)[-1] if '.' in resource.url.rsplit('/', 1)[-1] else ''
    base = secure_filename(resource.title) or f"resource-{resource.id}"
    name = f"{base}.{extension}" if extension else base
    counter = 1
    while name in used:
        counter += 1
        name = f"{base}-{counter}.{extension}" if extension else f"{base}-{counter}"
    used.add(name)
    return name


@bp.route('/classrooms/<int:classroom_id>/resources/download/<category>', methods=['GET'])
@login_required
def download_category(classroom_id, category):
    """Zip every stored file in a category. 'Uncategorized' selects resources without one."""
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)

    query = Resource.query.filter_by(classroom_id=classroom.id)
    if category == UNCATEGORIZED:
        query = query.filter(Resource.category.is_(None))
    else:
        query = query.filter_by(category=category)

    buffer = io.BytesIO()
    used = set()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as archive:
        for resource in query.order_by(Resource.uploaded_at.asc()).all():
            path = stored_path(resource.url)
            if path is None or not os.path.exists(path):
                current_app.logger.warning(f"Skipping resource {resource.id} in download: file not available")
                continue
            archive.write(path, _archive_name(resource, used))
    buffer.seek(0)

    return send_file(
        buffer,
        mimetype='application/zip',
        as_attachment=True,
        download_name=f"{secure_filename(category) or 'resources'}.zip",
    )
