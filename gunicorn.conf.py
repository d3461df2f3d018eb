"""
Production Server Configuration

Run the report API with Uvicorn workers under Gunicorn.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", f"0.0.0.0:{os.getenv('API_PORT', '8000')}")
backlog = 512

# Worker processes; each holds its own report cache
workers = int(os.getenv("API_WORKERS", min(multiprocessing.cpu_count() + 1, 4)))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 5000
max_requests_jitter = 500
timeout = 60
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "sales-reports-api"

# Server mechanics
daemon = False
pidfile = None

# Logging (application logs go through structlog on stdout)
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = None


def when_ready(server):
    server.log.info("Sales reports API ready on %s", bind)


def worker_abort(worker):
    worker.log.warning("Worker %s aborted", worker.pid)
