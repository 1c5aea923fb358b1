"""
SynthTrack

Generates synthetic, timestamped GPS activity tracks from a drawn route
and a few pace/elevation/heart rate settings, and exports them as GPX or
TCX. Celery tasks expose generation, export and pace preview.
"""

# Delay Celery import so the generation engine can be used without a broker
def get_celery_app():
    from .celery_app import app
    return app

__all__ = ['get_celery_app']
