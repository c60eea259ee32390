"""
Gunicorn configuration for the tracking-metrics API.

    gunicorn -c gunicorn.conf.py

Env vars that override defaults:
  PORT       — TCP port to bind (default: 5001)
  WORKERS    — number of worker processes (default: 2)
  LOG_LEVEL  — gunicorn log level (default: info)
"""
import os

wsgi_app = "tracking_metrics.main:app"

bind = f"0.0.0.0:{os.environ.get('PORT', '5001')}"

workers = int(os.environ.get("WORKERS", "2"))

# Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# Kill a worker that hasn't responded in 60 s.
timeout = 60

# stdout only; the container runtime collects it.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
