"""
Flask extension instances. Created unbound here and attached to the
application inside create_app() so every app gets its own store handle.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
