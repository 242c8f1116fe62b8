"""
Celery application and scheduled jobs.

Run the scheduler and a worker with::

    celery -A campus_reservations.tasks.sweeper beat
    celery -A campus_reservations.tasks.sweeper worker
"""
