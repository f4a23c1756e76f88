"""
Celery tasks package.

- scoring_tasks: AI re-analysis of applications
"""

from app.tasks import scoring_tasks

__all__ = ["scoring_tasks"]
