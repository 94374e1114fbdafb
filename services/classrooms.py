"""
Classroom creation and membership rules.
"""

import logging
import random
import string

from flask import current_app
from sqlalchemy.exc import IntegrityError

from extensions import db
from errors import ValidationError
from models import Classroom, Membership

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_classroom_code(length=6, max_attempts=50, rng=random):
    """Draw random codes until one is not already taken."""
    for _ in range(max_attempts):
        code = ''.join(rng.choice(CODE_ALPHABET) for _ in range(length))
        if Classroom.query.filter_by(code=code).first() is None:
            return code
    raise RuntimeError(f"Could not generate a unique classroom code after {max_attempts} attempts")


def create_classroom(creator, name, course_code=None, course_name=None, year=None, division=None):
    """
    Create the classroom and enroll its creator in one transaction. A code
    taken by a concurrent creation between the check and the commit is
    redrawn.
    """
    if not name or not name.strip():
        raise ValidationError('Classroom name is required')

    config = current_app.config
    max_attempts = config['CLASSROOM_CODE_MAX_ATTEMPTS']
    for attempt in range(1, max_attempts + 1):
        code = generate_classroom_code(config['CLASSROOM_CODE_LENGTH'], max_attempts)
        classroom = Classroom(
            name=name.strip(),
            code=code,
            invite_link=f"{config['APP_URL']}/join/{code}",
            course_code=course_code,
            course_name=course_name,
            year=year,
            division=division,
            creator=creator,
        )
        db.session.add(classroom)
        db.session.add(Membership(user=creator, classroom=classroom))
        try:
            db.session.commit()
            return classroom
        except IntegrityError:
            db.session.rollback()
            logger.warning("Classroom code %s was taken concurrently (attempt %d)", code, attempt)
    raise RuntimeError(f"Could not generate a unique classroom code after {max_attempts} attempts")


def is_member(user_id, classroom_id):
    return Membership.query.filter_by(user_id=user_id, classroom_id=classroom_id).first() is not None


def join_classroom(user, code):
    """Returns (classroom, created). Joining twice is not an error."""
    if not code or not isinstance(code, str):
        raise ValidationError('Invalid request: Missing or invalid code')
    classroom = Classroom.query.filter_by(code=code.strip().upper()).first()
    if classroom is None:
        return None, False
    if is_member(user.id, classroom.id):
        return classroom, False
    db.session.add(Membership(user=user, classroom=classroom))
    db.session.commit()
    return classroom, True
