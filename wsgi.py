#!/usr/bin/env python3
"""
WSGI entry point for Classroom Hub (Gunicorn etc.).
Run locally with: FLASK_ENV=development python wsgi.py
"""

from app import create_app

app = create_app()
application = app

if __name__ == "__main__":
    app.run(host='127.0.0.1', port=5000, debug=app.config.get('DEBUG', False))
