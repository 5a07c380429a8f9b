#!/usr/bin/env python
from fedforum import celery, create_app, db
from celery.signals import worker_process_init, task_prerun, task_postrun


app = create_app()
app.app_context().push()

from fedforum.activitypub import delivery


# Dispose of connection pool inherited from parent process after fork
@worker_process_init.connect
def init_celery_worker(**kwargs):
    """Called once when each worker process starts, so forked processes don't share connections."""
    # close=False prevents closing parent process connections
    db.engine.dispose(close=False)


@task_prerun.connect
def celery_task_prerun(*args, **kwargs):
    """Remove any existing database session before task starts to prevent stale connections"""
    db.session.remove()


@task_postrun.connect
def celery_task_postrun(*args, **kwargs):
    """Clean up database session after task completes"""
    db.session.remove()
