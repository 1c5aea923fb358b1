"""
Celery Application Configuration
"""

from celery import Celery
import os

# Initialize Celery
redis_url = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
app = Celery('synthtrack', broker=redis_url, backend=redis_url)

# Generation is bounded (a few thousand points), so a short limit is plenty
task_time_limit = int(os.getenv('SYNTHTRACK_TASK_TIME_LIMIT', '60'))

# Configure Celery
app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=task_time_limit,
)

# Auto-discover tasks
app.autodiscover_tasks(['synthtrack.tasks'])

__all__ = ['app']
