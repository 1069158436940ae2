"""Application instance for Gunicorn (``objectapi.wsgi:app``)."""
from objectapi.flask_app import create_app

app = create_app()
