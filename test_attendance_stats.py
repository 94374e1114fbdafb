"""
Test: attendance aggregation (percentages, standing, recovery plan).
"""
from types import SimpleNamespace

import pytest

from services.attendance_stats import (
    attendance_percentage, attendance_standing, classes_needed,
    courses_needing_attention, summarize_attendance,
)


def _record(classroom_id, is_present):
    return SimpleNamespace(classroom_id=classroom_id, is_present=is_present)


class TestAttendancePercentage:
    def test_no_sessions_is_zero(self):
        assert attendance_percentage(0, 0) == 0

    def test_simple_ratio(self):
        assert attendance_percentage(3, 4) == 75.0

    def test_always_within_bounds(self):
        for total in range(1, 13):
            for present in range(total + 1):
                assert 0 <= attendance_percentage(present, total) <= 100


class TestStanding:
    def test_bands(self):
        assert attendance_standing(75) == 'good'
        assert attendance_standing(100) == 'good'
        assert attendance_standing(74.9) == 'warning'
        assert attendance_standing(60) == 'warning'
        assert attendance_standing(59.99) == 'critical'
        assert attendance_standing(0) == 'critical'


class TestClassesNeeded:
    def test_seventy_of_hundred(self):
        assert classes_needed(70, 100) == 20

    def test_result_is_the_minimum(self):
        for total in range(1, 30):
            for present in range(total + 1):
                x = classes_needed(present, total)
                assert x >= 0
                assert (present + x) * 100 >= 75 * (total + x)
                if x > 0:
                    assert (present + x - 1) * 100 < 75 * (total + x - 1)

    def test_already_above_target(self):
        assert classes_needed(80, 100) == 0

    def test_no_sessions(self):
        assert classes_needed(0, 0) == 0

    def test_never_attended(self):
        assert classes_needed(0, 4) == 12

    def test_custom_target(self):
        assert classes_needed(5, 10, target=60) == 3

    def test_target_must_be_below_hundred(self):
        with pytest.raises(ValueError):
            classes_needed(1, 2, target=100)


class TestSummarizeAttendance:
    def test_empty_history(self):
        summary = summarize_attendance([])
        assert summary['byClassroom'] == []
        assert summary['overall']['total'] == 0
        assert summary['overall']['percentage'] == 0
        assert summary['overall']['classesNeeded'] == 0

    def test_groups_by_classroom(self):
        records = [
            _record(1, True), _record(1, True), _record(1, True), _record(1, False),
            _record(2, True), _record(2, False),
        ]
        classrooms = {
            1: SimpleNamespace(course_code='CS201', course_name='Data Structures', name='DS'),
            2: SimpleNamespace(course_code='MA101', course_name=None, name='Calculus'),
        }
        summary = summarize_attendance(records, classrooms)

        rows = {row['classroomId']: row for row in summary['byClassroom']}
        assert rows[1]['percentage'] == 75.0
        assert rows[1]['standing'] == 'good'
        assert rows[1]['needsAttention'] is False
        assert rows[1]['courseCode'] == 'CS201'
        assert rows[2]['percentage'] == 50.0
        assert rows[2]['standing'] == 'critical'
        assert rows[2]['classesNeeded'] == 2
        assert rows[2]['courseName'] == 'Calculus'

        overall = summary['overall']
        assert overall['total'] == 6
        assert overall['present'] == 4
        assert overall['percentage'] == pytest.approx(66.666, rel=1e-3)
        assert overall['standing'] == 'warning'

    def test_unlabelled_classroom_gets_blank_labels(self):
        row = summarize_attendance([_record(9, True)])['byClassroom'][0]
        assert row['courseCode'] == ''
        assert row['courseName'] == ''


class TestCoursesNeedingAttention:
    def test_worst_first(self):
        rows = [
            {'classroomId': 1, 'percentage': 70.0, 'needsAttention': True},
            {'classroomId': 2, 'percentage': 90.0, 'needsAttention': False},
            {'classroomId': 3, 'percentage': 40.0, 'needsAttention': True},
        ]
        assert [r['classroomId'] for r in courses_needing_attention(rows)] == [3, 1]
