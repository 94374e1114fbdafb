"""
Test: account sync, self-service profile and admin user management.
"""
from extensions import db
from models import Notification, NotificationType, Role, User


class TestSync:
    def test_first_sign_in_creates_student(self, app, client, auth_headers):
        response = client.post(
            '/api/user/sync',
            json={'email': 'ada@example.edu', 'firstName': 'Ada', 'lastName': 'Lovelace'},
            headers=auth_headers('auth|ada'),
        )
        assert response.status_code == 201
        assert response.get_json()['role'] == 'STUDENT'

        again = client.post('/api/user/sync', json={'firstName': 'Augusta'}, headers=auth_headers('auth|ada'))
        assert again.status_code == 200
        assert again.get_json()['firstName'] == 'Augusta'
        assert again.get_json()['lastName'] == 'Lovelace'

        with app.app_context():
            assert User.query.count() == 1

    def test_sync_cannot_set_role(self, client, auth_headers):
        response = client.post('/api/user/sync', json={'role': 'ADMIN'}, headers=auth_headers('auth|eve'))
        assert response.get_json()['role'] == 'STUDENT'

    def test_sync_requires_identity(self, client):
        assert client.post('/api/user/sync', json={}).status_code == 401

    def test_unknown_identity_is_unauthorized(self, client, auth_headers):
        assert client.get('/api/user', headers=auth_headers('never-synced')).status_code == 401


class TestSelfService:
    def test_update_profile_fields(self, client, auth_headers, student):
        response = client.put(
            '/api/user',
            json={'rollNo': '42', 'division': 'C', 'srn': 'SRN42', 'role': 'ADMIN'},
            headers=auth_headers(student),
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body['rollNo'] == '42'
        assert body['division'] == 'C'
        assert body['role'] == 'STUDENT'

    def test_body_must_be_object(self, client, auth_headers, student):
        response = client.put('/api/user', json=['rollNo'], headers=auth_headers(student))
        assert response.status_code == 400


class TestAdmin:
    def test_promote_to_professor(self, app, client, auth_headers, admin, student):
        response = client.put(
            f"/api/admin/users/{student}", json={'role': 'PROFESSOR'}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        with app.app_context():
            assert db.session.get(User, student).role == Role.PROFESSOR

    def test_invalid_role(self, client, auth_headers, admin, student):
        response = client.put(f"/api/admin/users/{student}", json={'role': 'DEAN'}, headers=auth_headers(admin))
        assert response.status_code == 400

    def test_non_admin_forbidden(self, client, auth_headers, professor, student):
        response = client.put(f"/api/admin/users/{student}", json={'role': 'ADMIN'}, headers=auth_headers(professor))
        assert response.status_code == 403
        assert response.get_json()['success'] is False

    def test_delete_student(self, app, client, auth_headers, admin, enrolled_student):
        response = client.delete(f"/api/admin/users/{enrolled_student}", headers=auth_headers(admin))
        assert response.status_code == 200
        with app.app_context():
            assert db.session.get(User, enrolled_student) is None

    def test_cannot_delete_content_owner(self, client, auth_headers, admin, professor, classroom):
        response = client.delete(f"/api/admin/users/{professor}", headers=auth_headers(admin))
        assert response.status_code == 400

    def test_cannot_delete_self(self, client, auth_headers, admin):
        response = client.delete(f"/api/admin/users/{admin}", headers=auth_headers(admin))
        assert response.status_code == 400

    def test_unknown_user(self, client, auth_headers, admin):
        assert client.delete('/api/admin/users/ghost', headers=auth_headers(admin)).status_code == 404

    def test_delete_drops_notifications_left_without_recipients(self, app, client, auth_headers, admin,
                                                                 enrolled_student, make_user):
        classmate = make_user('stu-2')
        with app.app_context():
            student = db.session.get(User, enrolled_student)
            other = db.session.get(User, classmate)
            solo = Notification(message='Only for Ada', type=NotificationType.ATTENDANCE, recipients=[student])
            shared = Notification(message='For both', type=NotificationType.RESOURCE, recipients=[student, other])
            db.session.add_all([solo, shared])
            db.session.commit()
            solo_id, shared_id = solo.id, shared.id

        response = client.delete(f"/api/admin/users/{enrolled_student}", headers=auth_headers(admin))
        assert response.status_code == 200

        with app.app_context():
            assert db.session.get(Notification, solo_id) is None
            remaining = db.session.get(Notification, shared_id)
            assert [u.id for u in remaining.recipients] == [classmate]


class TestAdminListing:
    def test_lists_every_user_with_memberships(self, client, auth_headers, admin, professor, classroom,
                                               enrolled_student):
        response = client.get('/api/admin/users', headers=auth_headers(admin))
        assert response.status_code == 200
        users = {u['id']: u for u in response.get_json()['users']}
        assert set(users) == {admin, professor, enrolled_student}
        assert users[enrolled_student]['memberships'] == [
            {'classroomId': classroom['id'], 'name': 'DS Section A', 'courseCode': 'CS201'},
        ]
        assert users[enrolled_student]['submissions'] == []
        assert users[professor]['classroomsCreated'] == 1

    def test_role_filter(self, client, auth_headers, admin, professor, student):
        response = client.get('/api/admin/users?role=professor', headers=auth_headers(admin))
        assert [u['id'] for u in response.get_json()['users']] == [professor]

    def test_invalid_role_filter(self, client, auth_headers, admin):
        response = client.get('/api/admin/users?role=dean', headers=auth_headers(admin))
        assert response.status_code == 400

    def test_non_admin_forbidden(self, client, auth_headers, professor):
        response = client.get('/api/admin/users', headers=auth_headers(professor))
        assert response.status_code == 403
