import logging
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_hr_user
from app.crud import application as application_crud
from app.crud import note as note_crud
from app.schemas.note import NoteCreate, NoteResponse
from app.schemas.user import CurrentUser

router = APIRouter(tags=["Notes"])
logger = logging.getLogger(__name__)


@router.post("/applications/{application_id}/notes", status_code=201, response_model=NoteResponse)
def create_note(
    application_id: UUID,
    request: NoteCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    """Add an internal HR note to an application (never shown to the candidate)."""
    if not application_crud.get_by_id(db, application_id):
        raise HTTPException(status_code=404, detail="Application not found")

    return note_crud.create(db, application_id, current_user.id, current_user.email, request.content)


@router.get("/applications/{application_id}/notes", response_model=list[NoteResponse])
def list_notes(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    if not application_crud.get_by_id(db, application_id):
        raise HTTPException(status_code=404, detail="Application not found")
    return note_crud.get_for_application(db, application_id)


@router.delete("/notes/{note_id}", status_code=204)
def delete_note(
    note_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_hr_user)
):
    note = note_crud.get_by_id(db, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")

    note_crud.delete(db, note)
    logger.info(f"Note {note_id} deleted by {current_user.display}")
    return None
