import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-key'

    # Prioritize the production DATABASE_URL, with SQLite as a fallback.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(BASE_DIR, 'instance', 'classroom_hub.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')

    # Max file upload size (e.g., 16MB)
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # The upstream identity provider forwards the authenticated user id in this header
    AUTH_USER_HEADER = os.environ.get('AUTH_USER_HEADER', 'X-User-Id')

    # Batch attendance writes
    ATTENDANCE_CHUNK_SIZE = int(os.environ.get('ATTENDANCE_CHUNK_SIZE', '10'))
    ATTENDANCE_CHUNK_TIMEOUT_MS = int(os.environ.get('ATTENDANCE_CHUNK_TIMEOUT_MS', '10000'))

    # Classroom join codes
    CLASSROOM_CODE_LENGTH = 6
    CLASSROOM_CODE_MAX_ATTEMPTS = int(os.environ.get('CLASSROOM_CODE_MAX_ATTEMPTS', '50'))

    # Outbound email (best effort)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY', '')
    RESEND_FROM_EMAIL = os.environ.get('RESEND_FROM_EMAIL', 'Classroom Hub <noreply@classroomhub.local>')
    APP_URL = os.environ.get('APP_URL', 'http://localhost:5000')

    STUDENT_ATTENDANCE_PAGE_SIZE = 10


class ProductionConfig(Config):
    """Production configuration with enhanced security."""
    DEBUG = False
    TESTING = False

    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # In-memory database for tests
    RESEND_API_KEY = ''
