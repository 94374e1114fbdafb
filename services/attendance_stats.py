"""
Attendance aggregation. Pure functions over attendance records; nothing here
touches the database and no aggregate is ever persisted.

Records only need ``classroom_id`` and ``is_present`` attributes.
"""

import math

GOOD_STANDING_THRESHOLD = 75
WARNING_THRESHOLD = 60


def attendance_percentage(present, total):
    """Percentage of sessions attended; 0 when there are no sessions."""
    if total <= 0:
        return 0.0
    return (present / total) * 100


def attendance_standing(percentage):
    if percentage >= GOOD_STANDING_THRESHOLD:
        return 'good'
    if percentage >= WARNING_THRESHOLD:
        return 'warning'
    return 'critical'


def classes_needed(present, total, target=GOOD_STANDING_THRESHOLD):
    """
    Smallest number of consecutive attended sessions x with
    (present + x) / (total + x) >= target / 100. Never negative.
    """
    if not 0 <= target < 100:
        raise ValueError('target must be in [0, 100)')
    shortfall = target * total - 100 * present
    if shortfall <= 0:
        return 0
    return math.ceil(shortfall / (100 - target))


def _summary(present, total):
    percentage = attendance_percentage(present, total)
    return {
        'total': total,
        'present': present,
        'percentage': percentage,
        'standing': attendance_standing(percentage),
        'needsAttention': percentage < GOOD_STANDING_THRESHOLD,
        'classesNeeded': classes_needed(present, total),
    }


def summarize_attendance(records, classrooms=None):
    """
    Build overall and per-classroom figures.

    ``classrooms`` maps classroom id to an object with ``course_code`` and
    ``course_name`` used to label each row.
    """
    classrooms = classrooms or {}
    counts = {}
    for record in records:
        present, total = counts.get(record.classroom_id, (0, 0))
        counts[record.classroom_id] = (present + (1 if record.is_present else 0), total + 1)

    by_classroom = []
    for classroom_id, (present, total) in counts.items():
        classroom = classrooms.get(classroom_id)
        row = {
            'classroomId': classroom_id,
            'courseCode': getattr(classroom, 'course_code', None) or '',
            'courseName': getattr(classroom, 'course_name', None) or getattr(classroom, 'name', None) or '',
        }
        row.update(_summary(present, total))
        by_classroom.append(row)

    overall_present = sum(present for present, _ in counts.values())
    overall_total = sum(total for _, total in counts.values())

    return {
        'overall': _summary(overall_present, overall_total),
        'byClassroom': by_classroom,
    }


def courses_needing_attention(by_classroom):
    """Courses under the good-standing threshold, worst first."""
    flagged = [row for row in by_classroom if row['needsAttention']]
    return sorted(flagged, key=lambda row: row['percentage'])
