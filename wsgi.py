"""
WSGI / Flask CLI entry point.

Usage:
    flask --app wsgi run
    flask --app wsgi check-flow-data
    gunicorn wsgi:app
"""

from coinnovation import create_app

app = create_app()
