"""
Shared pytest fixtures.

Each test gets a fresh application on an in-memory SQLite database. Request
tests talk to the app through the test client and never hold an app context
open around a request, since the signed-in user is cached on ``g``; data is
prepared inside short-lived app contexts and passed around by id.
"""
import pytest

from app import create_app
from config import TestingConfig
from extensions import db
from models import Membership, Role, User
from services.classrooms import create_classroom


@pytest.fixture
def app(tmp_path):
    class _TestConfig(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(_TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for service-level tests that do not use the client."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def _headers(user_id):
        return {app.config['AUTH_USER_HEADER']: user_id}
    return _headers


@pytest.fixture
def make_user(app):
    def _make(user_id, role=Role.STUDENT, roll_no=None, first_name=None, email=None):
        with app.app_context():
            db.session.add(User(
                id=user_id,
                role=role,
                roll_no=roll_no,
                first_name=first_name or user_id.title(),
                email=email or f"{user_id}@example.edu",
            ))
            db.session.commit()
        return user_id
    return _make


@pytest.fixture
def enroll(app):
    def _enroll(user_id, classroom_id):
        with app.app_context():
            db.session.add(Membership(user_id=user_id, classroom_id=classroom_id))
            db.session.commit()
    return _enroll


@pytest.fixture
def professor(make_user):
    return make_user('prof-1', role=Role.PROFESSOR, first_name='Grace')


@pytest.fixture
def admin(make_user):
    return make_user('admin-1', role=Role.ADMIN)


@pytest.fixture
def student(make_user):
    return make_user('stu-1', roll_no='01', first_name='Ada')


@pytest.fixture
def classroom(app, professor):
    """A classroom created by prof-1; returns {'id', 'code'}."""
    with app.app_context():
        creator = db.session.get(User, professor)
        created = create_classroom(creator, 'DS Section A', course_code='CS201', course_name='Data Structures')
        return {'id': created.id, 'code': created.code}


@pytest.fixture
def enrolled_student(student, classroom, enroll):
    enroll(student, classroom['id'])
    return student
