import os

# App
wsgi_app = "fleetapi:create_app()"

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
# WebSocket connections hold a thread each; the Redis relay fans events out
# across workers.
worker_class = "gthread"
threads = int(os.getenv("GUNICORN_THREADS", "32"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
