"""
Submission and grade aggregation over a user's submissions joined with their
assignments (``assignment.deadline`` and ``assignment.max_marks``).

A submission counts as evaluated only when ``marks > 0``. A genuine score of
zero therefore reads as "Not Evaluated" everywhere, including the grader's
ordering.
"""

EXCELLENT_THRESHOLD = 75
GOOD_THRESHOLD = 60


def is_late(submitted_at, deadline):
    """Late only when strictly after the deadline."""
    return submitted_at > deadline


def is_evaluated(marks):
    return marks is not None and marks > 0


def evaluation_label(marks):
    return 'Evaluated' if is_evaluated(marks) else 'Not Evaluated'


def performance_band(percentage):
    if percentage >= EXCELLENT_THRESHOLD:
        return 'Excellent'
    if percentage >= GOOD_THRESHOLD:
        return 'Good'
    return 'Needs Improvement'


def summarize_submissions(submissions):
    total = 0
    on_time = 0
    evaluated = 0
    marks_awarded = 0.0
    max_marks = 0.0

    for submission in submissions:
        assignment = submission.assignment
        total += 1
        if not is_late(submission.submitted_at, assignment.deadline):
            on_time += 1
        if is_evaluated(submission.marks):
            evaluated += 1
            marks_awarded += submission.marks
            max_marks += assignment.max_marks

    percentage = (marks_awarded / max_marks) * 100 if max_marks > 0 else 0.0
    return {
        'total': total,
        'onTime': on_time,
        'late': total - on_time,
        'evaluated': evaluated,
        'marksAwarded': marks_awarded,
        'maxMarks': max_marks,
        'percentage': percentage,
        'band': performance_band(percentage),
        'onTimeRate': on_time / total if total else 0.0,
    }


def grading_sort_key(submission):
    """Unevaluated first, then roll number compared as plain strings."""
    roll_no = getattr(submission.user, 'roll_no', None) or ''
    return (is_evaluated(submission.marks), roll_no)


def sort_for_grading(submissions):
    return sorted(submissions, key=grading_sort_key)
