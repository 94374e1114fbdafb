import enum
from datetime import datetime

from flask_login import UserMixin

from extensions import db


class Role(enum.Enum):
    """Closed set of account roles."""
    STUDENT = 'STUDENT'
    PROFESSOR = 'PROFESSOR'
    ADMIN = 'ADMIN'


class NotificationType(enum.Enum):
    ASSIGNMENT = 'ASSIGNMENT'
    ATTENDANCE = 'ATTENDANCE'
    MEMBERSHIP = 'MEMBERSHIP'
    RESOURCE = 'RESOURCE'


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model, UserMixin):
    """
    Account record. The id is the identifier issued by the external auth
    provider; rows are created on first sign-in and never removed except by
    an explicit admin action.
    """
    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    role = db.Column(db.Enum(Role), default=Role.STUDENT, nullable=False)

    # Student fields
    roll_no = db.Column(db.String(32), nullable=True)
    year = db.Column(db.String(20), nullable=True)
    division = db.Column(db.String(10), nullable=True)
    srn = db.Column(db.String(32), nullable=True)
    prn = db.Column(db.String(32), nullable=True)

    # Professor fields
    office_hours = db.Column(db.String(200), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    memberships = db.relationship('Membership', back_populates='user', cascade='all, delete-orphan')
    attendance_records = db.relationship('Attendance', back_populates='user', cascade='all, delete-orphan')
    submissions = db.relationship('Submission', back_populates='user', cascade='all, delete-orphan')

    @property
    def full_name(self):
        return ' '.join(part for part in (self.first_name, self.last_name) if part)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'role': self.role.value,
            'rollNo': self.roll_no,
            'year': self.year,
            'division': self.division,
            'srn': self.srn,
            'prn': self.prn,
            'officeHours': self.office_hours,
        }

    def __repr__(self):
        return f"User('{self.id}', Role: '{self.role.value}')"


class Classroom(db.Model):
    """
    A course offering. Owns its assignments, resources, memberships and
    attendance history.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    invite_link = db.Column(db.String(300), nullable=True)
    course_code = db.Column(db.String(50), nullable=True)
    course_name = db.Column(db.String(150), nullable=True)
    year = db.Column(db.String(20), nullable=True)
    division = db.Column(db.String(10), nullable=True)
    creator_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    creator = db.relationship('User', backref='created_classrooms', foreign_keys=[creator_id])
    memberships = db.relationship('Membership', back_populates='classroom', cascade='all, delete-orphan')
    assignments = db.relationship('Assignment', back_populates='classroom', cascade='all, delete-orphan')
    resources = db.relationship('Resource', back_populates='classroom', cascade='all, delete-orphan')
    attendance_records = db.relationship('Attendance', back_populates='classroom', cascade='all, delete-orphan')

    @property
    def display_name(self):
        return self.course_name or self.name

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'inviteLink': self.invite_link,
            'courseCode': self.course_code,
            'courseName': self.course_name,
            'year': self.year,
            'division': self.division,
            'creatorId': self.creator_id,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f"Classroom('{self.name}', Code: '{self.code}')"


class Membership(db.Model):
    """Enrollment link between a user and a classroom."""
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User', back_populates='memberships')
    classroom = db.relationship('Classroom', back_populates='memberships')

    __table_args__ = (db.UniqueConstraint('user_id', 'classroom_id', name='uq_membership_user_classroom'),)

    def __repr__(self):
        return f"Membership(User: {self.user_id}, Classroom: {self.classroom_id})"


class Assignment(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    requirements = db.Column(db.JSON, nullable=False, default=list)
    deadline = db.Column(db.DateTime, nullable=False)
    max_marks = db.Column(db.Float, nullable=False)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    creator_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    classroom = db.relationship('Classroom', back_populates='assignments')
    creator = db.relationship('User', foreign_keys=[creator_id])
    submissions = db.relationship('Submission', back_populates='assignment', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'requirements': list(self.requirements or []),
            'deadline': _iso(self.deadline),
            'maxMarks': self.max_marks,
            'classroomId': self.classroom_id,
            'creatorId': self.creator_id,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f"Assignment('{self.title}', Classroom: {self.classroom_id})"


class Submission(db.Model):
    """
    A student's single current artifact for an assignment. A marks value of
    0 is indistinguishable from "not yet graded".
    """
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=False)
    content = db.Column(db.String(500), nullable=False)
    marks = db.Column(db.Float, nullable=True)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User', back_populates='submissions')
    assignment = db.relationship('Assignment', back_populates='submissions')

    __table_args__ = (db.UniqueConstraint('user_id', 'assignment_id', name='uq_submission_user_assignment'),)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'assignmentId': self.assignment_id,
            'content': self.content,
            'marks': self.marks,
            'submittedAt': _iso(self.submitted_at),
        }

    def __repr__(self):
        return f"Submission(User: {self.user_id}, Assignment: {self.assignment_id})"


class Attendance(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    is_present = db.Column(db.Boolean, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship('User', back_populates='attendance_records')
    classroom = db.relationship('Classroom', back_populates='attendance_records')

    # One record per user per classroom per calendar day
    __table_args__ = (
        db.UniqueConstraint('user_id', 'classroom_id', 'date', name='uq_attendance_user_classroom_date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'classroomId': self.classroom_id,
            'date': _iso(self.date),
            'isPresent': self.is_present,
        }

    def __repr__(self):
        return f"Attendance(User: {self.user_id}, Classroom: {self.classroom_id}, Date: {self.date}, Present: {self.is_present})"


class Resource(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(100), nullable=True)
    url = db.Column(db.String(500), nullable=False)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    uploaded_by = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    classroom = db.relationship('Classroom', back_populates='resources')
    uploader = db.relationship('User', foreign_keys=[uploaded_by])

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'category': self.category,
            'url': self.url,
            'classroomId': self.classroom_id,
            'uploadedBy': self.uploaded_by,
            'uploadedAt': _iso(self.uploaded_at),
        }

    def __repr__(self):
        return f"Resource('{self.title}', Classroom: {self.classroom_id})"


notification_recipients = db.Table(
    'notification_recipients',
    db.Column('notification_id', db.Integer, db.ForeignKey('notification.id', ondelete='CASCADE'), primary_key=True),
    db.Column('user_id', db.String(64), db.ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
)


class Notification(db.Model):
    """
    Server-generated message addressed to a set of users. Only the read flag
    ever changes after creation.
    """
    id = db.Column(db.Integer, primary_key=True)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.Enum(NotificationType), nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    related_id = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    recipients = db.relationship('User', secondary=notification_recipients, backref='notifications', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'message': self.message,
            'type': self.type.value,
            'read': self.is_read,
            'relatedId': self.related_id,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f"Notification(Type: {self.type.value}, Read: {self.is_read})"
