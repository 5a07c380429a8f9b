import multiprocessing

cpu_cores = multiprocessing.cpu_count()

workers = max(2, cpu_cores // 2)
threads = min(8, cpu_cores * 2)  # deliveries block a thread until every inbox has answered

bind = "0.0.0.0:5000"
umask = 0o007
reload = False

worker_class = "gthread"
wsgi_app = "forum:app"

# logging
accesslog = "-"
errorlog = "-"

max_requests = 2000
max_requests_jitter = 50


def post_fork(server, worker):
    """Dispose of the connection pool inherited from the parent process."""
    from fedforum import db

    # close=False prevents closing parent process connections
    db.engine.dispose(close=False)
    server.log.info(f"Worker {worker.pid}: Disposed of inherited connection pool")
