"""Gunicorn configuration file.

Secrets (AUDIT_LOG_SIGNING_KEY) are read by objectapi.config.settings from
/run/secrets or the environment when each worker builds the app.
"""
import os

wsgi_app = "objectapi.wsgi:app"
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:5000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info")


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Reports whether Docker secrets are mounted so a missing audit signing key
    is visible in the worker log.
    """
    from pathlib import Path
    secrets_dir = Path("/run/secrets")
    if secrets_dir.exists() and secrets_dir.is_dir():
        secret_files = list(secrets_dir.glob("*"))
        worker.log.info(f"Found {len(secret_files)} secrets in /run/secrets")
        return

    if not os.environ.get("AUDIT_LOG_SIGNING_KEY"):
        worker.log.warning("No /run/secrets mount and no AUDIT_LOG_SIGNING_KEY: audit events will be unsigned")
