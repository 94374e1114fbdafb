"""
Local object storage for uploaded submissions and resources. Stored files
are addressed by the public URL returned from save_upload().
"""

import logging
import os
import time

from flask import current_app
from werkzeug.utils import secure_filename

from errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'txt', 'pdf', 'png', 'jpg', 'jpeg', 'gif', 'doc', 'docx', 'xls', 'xlsx', 'ppt', 'pptx', 'zip', 'py', 'ipynb'}
URL_PREFIX = '/uploads/'


def allowed_file(filename):
    """Check if file extension is allowed."""
    return '.' in filename and \
           filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def save_upload(file_storage, subfolder):
    """Persist an uploaded file and return its public URL."""
    if file_storage is None or not file_storage.filename:
        raise ValidationError('No file uploaded')
    if not allowed_file(file_storage.filename):
        raise ValidationError(f"File type not allowed: {file_storage.filename}")

    filename = f"{int(time.time() * 1000)}-{secure_filename(file_storage.filename)}"
    directory = os.path.join(current_app.config['UPLOAD_FOLDER'], subfolder)
    os.makedirs(directory, exist_ok=True)
    file_storage.save(os.path.join(directory, filename))
    logger.info("Stored upload %s/%s", subfolder, filename)
    return f"{URL_PREFIX}{subfolder}/{filename}"


def stored_path(url):
    """Local filesystem path of an upload URL, or None for URLs stored elsewhere."""
    if not url or not url.startswith(URL_PREFIX):
        return None
    relative = url[len(URL_PREFIX):]
    return os.path.join(current_app.config['UPLOAD_FOLDER'], *relative.split('/'))


def delete_upload(url):
    """Remove a stored file. Returns False when it is not a local upload or already gone."""
    path = stored_path(url)
    if path is None or not os.path.exists(path):
        return False
    try:
        os.remove(path)
        return True
    except OSError as e:
        logger.warning("Could not delete stored file %s: %s", path, e)
        return False
