"""
Gunicorn configuration for the Taskflow production server.

Env vars that override defaults:
  PORT     TCP port to bind
  WORKERS  number of worker processes (default: 2)

Each worker runs the FastAPI lifespan, so each would start its own due-date
scanner. Set DUE_DATE_SCANNER_ENABLED=false on the web service and run a
single-worker instance with it enabled.
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "2"))

# Each worker runs Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# Kill a worker that hasn't responded in 120 s.
timeout = 120

# stdout only; the app's own records go through taskflow.core.logging.
loglevel = "info"
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

# Wait up to 30 s for in-flight requests on restart.
graceful_timeout = 30
