"""
Attendance routes: per-day reads, batched writes and range reports.
"""

from datetime import date, timedelta

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from errors import ValidationError
from models import Attendance, Membership, Role, User
from services.attendance_stats import summarize_attendance
from services.batch_attendance import BatchAttendanceWriter, parse_calendar_date
from .utils import (
    get_json_body, get_classroom_or_404,
    require_classroom_access, require_classroom_manager,
)

bp = Blueprint('attendance', __name__)


@bp.route('/classrooms/<int:classroom_id>/attendance', methods=['GET'])
@login_required
def get_attendance(classroom_id):
    """[{userId, isPresent}] for one day, in no particular order."""
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_access(classroom)

    date_str = request.args.get('date')
    if not date_str:
        raise ValidationError('Date is required')
    day = parse_calendar_date(date_str)

    records = Attendance.query.filter_by(classroom_id=classroom.id, date=day).all()
    return jsonify([{'userId': r.user_id, 'isPresent': r.is_present} for r in records])


@bp.route('/classrooms/<int:classroom_id>/attendance/batch', methods=['POST'])
@login_required
def batch_attendance(classroom_id):
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)
    data = get_json_body()

    writer = BatchAttendanceWriter.from_config(current_app.config)
    results = writer.write(classroom, data.get('date'), data.get('updates'))

    current_app.logger.info(
        f"User {current_user.id} saved attendance for classroom {classroom.id} "
        f"({sum(r['count'] for r in results)} records in {len(results)} chunks)"
    )
    return jsonify({'message': 'Batch attendance updated successfully', 'data': results})


@bp.route('/classrooms/<int:classroom_id>/attendance/report', methods=['GET'])
@login_required
def attendance_report(classroom_id):
    """Per-student summary over a date range (defaults to the last 30 days)."""
    classroom = get_classroom_or_404(classroom_id)
    require_classroom_manager(classroom)

    end = parse_calendar_date(request.args['to']) if request.args.get('to') else date.today()
    start = parse_calendar_date(request.args['from']) if request.args.get('from') else end - timedelta(days=30)
    if start > end:
        raise ValidationError('from must not be after to')

    records = Attendance.query.filter(
        Attendance.classroom_id == classroom.id,
        Attendance.date >= start,
        Attendance.date <= end,
    ).all()

    students = (
        User.query.join(Membership, Membership.user_id == User.id)
        .filter(Membership.classroom_id == classroom.id, User.role == Role.STUDENT)
        .order_by(User.roll_no.asc())
        .all()
    )
    by_user = {}
    for record in records:
        by_user.setdefault(record.user_id, []).append(record)

    rows = []
    for student in students:
        summary = summarize_attendance(by_user.get(student.id, []))['overall']
        rows.append({
            'userId': student.id,
            'rollNo': student.roll_no,
            'firstName': student.first_name,
            'lastName': student.last_name,
            **summary,
        })

    return jsonify({
        'classroomId': classroom.id,
        'from': start.isoformat(),
        'to': end.isoformat(),
        'sessions': len({record.date for record in records}),
        'students': rows,
    })
