"""Gunicorn configuration for the wallet service.

Run with ``gunicorn -c gunicorn.conf.py passwallet.wsgi:app``.

Challenges, codes and users live in process memory, so the service must
run as a single worker; threads share the stores safely.
"""

import os

# Server socket
bind = os.getenv("GUNICORN_BIND", f"0.0.0.0:{os.getenv('PORT', '3001')}")
backlog = 2048

# One worker: the stores are per process
workers = 1
worker_class = "gthread"
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

reload = os.getenv("FLASK_ENV", "production") == "development"

# Logging
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")

# Behind the merchant's reverse proxy
forwarded_allow_ips = os.getenv("GUNICORN_FORWARDED_ALLOW_IPS", "127.0.0.1,::1")

def on_starting(server):
    server.log.info("PassWallet is starting")

def post_worker_init(worker):
    worker.log.info(f"Worker {worker.pid} initialized")
