import os

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:5000")
workers = int(os.getenv("GUNICORN_WORKERS", 4))
worker_class = "sync"
timeout = 120
keepalive = 5
max_requests = 1000
max_requests_jitter = 50

wsgi_app = "backoffice.app:create_app()"

# Logging
accesslog = "-"  # stdout
errorlog = "-"  # stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# For development with reload
reload = os.getenv("FLASK_ENV") == "development"


def on_starting(server):
    """Refuse to boot with missing or insecure settings in production."""
    from backoffice.utils.startup_check import validate_environment

    validate_environment()
