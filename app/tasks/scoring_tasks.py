"""
Background re-scoring of applications.

One task per application. A new submission queues one for itself; the
job-level reanalyze endpoint fans out over every application of a job.
"""

import asyncio
import logging
from uuid import UUID

from app.core.celery_app import celery_app
from app.core.database import SessionLocal
from app.core.exceptions import PipelineError
from app.crud import application as application_crud
from app.services.reanalysis import reanalyze_application

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.scoring_tasks.reanalyze_application_task", bind=True)
def reanalyze_application_task(self, application_id: str, auto_advance: bool = False):
    """
    Re-run the AI resume match for one application.

    Args:
        application_id: UUID of the application, as a string
        auto_advance: Score as the resume_screening stage so the application
            can auto-advance (set when scoring a fresh submission)

    Returns:
        dict: status plus the new match score, or the error
    """
    logger.info(f"[Task {self.request.id}] Re-analyzing Application {application_id}")

    db = SessionLocal()
    try:
        application = application_crud.get_by_id(db, UUID(application_id))
        if not application:
            logger.error(f"[Task {self.request.id}] Application {application_id} not found")
            return {"status": "error", "message": "Application not found"}

        # Async AI client from a synchronous worker
        result = asyncio.run(reanalyze_application(db, application, auto_advance=auto_advance))

        logger.info(f"[Task {self.request.id}] Application {application_id} scored {result['match_score']}")
        return {
            "status": "success",
            "application_id": application_id,
            "match_score": result["match_score"],
            "advanced": result["advanced"],
        }

    except PipelineError as e:
        db.rollback()
        logger.error(f"[Task {self.request.id}] Re-analysis failed for Application {application_id}: {e.message}")
        return {"status": "failed", "error": e.message}

    except Exception as e:
        db.rollback()
        logger.error(f"[Task {self.request.id}] Unexpected error for Application {application_id}: {e}", exc_info=True)
        return {"status": "error", "error": str(e)}

    finally:
        db.close()
