"""
Gunicorn configuration for BizDash Analytics Dashboard.

Threaded workers share one in-memory result cache per process; set
CACHE_BACKEND=redis to share payloads across worker processes.
"""

import os

# Server socket
bind = f"0.0.0.0:{os.getenv('DASH_PORT', '8050')}"
backlog = 2048

# Worker processes
# Single worker with threads keeps one in-memory cache for every request
workers = int(os.getenv("GUNICORN_WORKERS", "1"))
worker_class = 'gthread'
threads = 8

# Worker timeout
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = '-'  # Log to stdout
errorlog = '-'   # Log to stderr
loglevel = 'info'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = 'bizdash-dashboard'

# Server mechanics
daemon = False
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None

# Cleanup worker threads are started in the worker, not the master
preload_app = False

# Memory management
max_requests = 5000  # Restart worker after N requests
max_requests_jitter = 200

# Debugging
reload = False
check_config = False


def on_starting(server):
    """Called just before the master process is initialized."""
    print("[GUNICORN] Starting BizDash Analytics Dashboard")


def on_reload(server):
    """Called to recycle workers during a reload."""
    print("[GUNICORN] Reloading workers")


def worker_int(worker):
    """Called when a worker receives SIGINT or SIGQUIT."""
    print(f"[GUNICORN] Worker {worker.pid} interrupted")


def worker_abort(worker):
    """Called when a worker receives SIGABRT."""
    print(f"[GUNICORN] Worker {worker.pid} aborted")


def worker_exit(server, worker):
    """Called in the worker process just after it has exited."""
    import wsgi
    wsgi.shutdown()
    print(f"[GUNICORN] Worker {worker.pid} exited")
