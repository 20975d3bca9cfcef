import multiprocessing
import os

wsgi_app = "stampqr:create_app()"
workers = int(os.environ.get('WEB_CONCURRENCY', (multiprocessing.cpu_count() * 2) + 1))
threads = int(os.environ.get('GUNICORN_THREADS', '2'))
worker_class = "gthread"
# app, DB pool and redis client are created inside each worker
preload_app = False
bind = os.environ.get('BIND', ":8000")
forwarded_allow_ips = "*"
timeout = 30
keepalive = 75
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()
