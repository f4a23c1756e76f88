from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.note import CandidateNote


def create(db: Session, application_id: UUID, author_id: str, author_email: Optional[str], content: str) -> CandidateNote:
    note = CandidateNote(
        application_id=application_id,
        author_id=author_id,
        author_email=author_email,
        content=content,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


def get_by_id(db: Session, note_id: UUID) -> Optional[CandidateNote]:
    return db.query(CandidateNote).filter(CandidateNote.id == note_id).first()


def get_for_application(db: Session, application_id: UUID) -> List[CandidateNote]:
    return (
        db.query(CandidateNote)
        .filter(CandidateNote.application_id == application_id)
        .order_by(CandidateNote.created_at.desc())
        .all()
    )


def delete(db: Session, note: CandidateNote) -> None:
    db.delete(note)
    db.commit()
