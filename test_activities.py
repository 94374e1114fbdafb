"""
Test: the recent activity feed.
"""
from datetime import date


def _mark(client, headers, classroom_id, day, user_id, status):
    return client.post(
        f"/api/classrooms/{classroom_id}/attendance/batch",
        json={'date': day, 'updates': [{'userId': user_id, 'status': status}]},
        headers=headers,
    )


def _feed(client, headers):
    response = client.get('/api/activities', headers=headers)
    assert response.status_code == 200
    return response.get_json()['activities']


class TestActivities:
    def test_empty(self, client, auth_headers, student):
        assert _feed(client, auth_headers(student)) == []

    def test_recent_attendance_only(self, client, auth_headers, professor, classroom, enrolled_student):
        prof = auth_headers(professor)
        _mark(client, prof, classroom['id'], date.today().isoformat(), enrolled_student, 'absent')
        _mark(client, prof, classroom['id'], '2020-01-01', enrolled_student, 'present')

        feed = _feed(client, auth_headers(enrolled_student))
        assert [(a['type'], a['title']) for a in feed] == [('attendance', 'Missed Data Structures')]
        assert feed[0]['details'] == {'classroomName': 'Data Structures', 'status': 'absent'}

    def test_submission_becomes_grade(self, client, auth_headers, professor, classroom, enrolled_student):
        prof = auth_headers(professor)
        assignment = client.post(
            f"/api/classrooms/{classroom['id']}/assignments",
            json={'title': 'Queues', 'deadline': '2030-01-01T00:00:00Z', 'maxMarks': 10},
            headers=prof,
        ).get_json()
        submission = client.post(
            f"/api/classrooms/{classroom['id']}/assignments/{assignment['id']}/submit",
            json={'content': 'queues.pdf'},
            headers=auth_headers(enrolled_student),
        ).get_json()
        _mark(client, prof, classroom['id'], date.today().isoformat(), enrolled_student, 'present')

        feed = _feed(client, auth_headers(enrolled_student))
        assert {(a['type'], a['title']) for a in feed} == {
            ('submission', 'Submitted Queues'),
            ('attendance', 'Attended Data Structures'),
        }

        client.patch(f"/api/submissions/{submission['id']}/marks", json={'marks': 9}, headers=prof)
        graded = [a for a in _feed(client, auth_headers(enrolled_student)) if a['type'] == 'grade']
        assert [a['title'] for a in graded] == ['Received grade for Queues']
        assert graded[0]['details'] == {
            'classroomName': 'Data Structures',
            'grade': 9.0,
            'maxGrade': 10.0,
            'submissionStatus': 'on_time',
        }

    def test_feed_is_per_user(self, client, auth_headers, professor, classroom, enrolled_student, make_user):
        other = make_user('stu-2')
        _mark(client, auth_headers(professor), classroom['id'], date.today().isoformat(), other, 'present')
        assert _feed(client, auth_headers(enrolled_student)) == []
