import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.candidate import Candidate
from ..schemas.records import CandidateCreate, CandidateUpdate
from ..services.field_mapping import CANDIDATE_FIELDS, candidate_to_api, to_storage
from ..utils.error_handlers import NotFoundError, get_error_message, handle_database_error
from ..utils.roles import staff_only
from .exports import pdf_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/candidates", tags=["Candidates"])


def _get_candidate(db: Session, candidate_id: int) -> Candidate:
    try:
        candidate = db.query(Candidate).filter(Candidate.id == candidate_id).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "loading candidate")
    if not candidate:
        raise NotFoundError(get_error_message("candidate_not_found"))
    return candidate


@router.get("")
def list_candidates(current=Depends(staff_only), db: Session = Depends(get_db)):
    try:
        rows = db.query(Candidate).order_by(Candidate.created_at.desc(), Candidate.id.desc()).all()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "listing candidates")
    return {"success": True, "candidates": [candidate_to_api(c) for c in rows]}


@router.post("", status_code=201)
def create_candidate(payload: CandidateCreate, current=Depends(staff_only), db: Session = Depends(get_db)):
    candidate = Candidate(**to_storage(CANDIDATE_FIELDS, payload.to_payload()))
    try:
        db.add(candidate)
        db.commit()
        db.refresh(candidate)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating candidate")

    logger.info("Candidate %s created by user %s", candidate.id, current["id"])
    return {"success": True, "candidate": candidate_to_api(candidate)}


@router.get("/{candidate_id:int}")
def get_candidate(candidate_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    return {"success": True, "candidate": candidate_to_api(_get_candidate(db, candidate_id))}


@router.put("/{candidate_id:int}")
def update_candidate(
    candidate_id: int,
    payload: CandidateUpdate,
    current=Depends(staff_only),
    db: Session = Depends(get_db),
):
    candidate = _get_candidate(db, candidate_id)
    for column, value in to_storage(CANDIDATE_FIELDS, payload.to_payload(), partial=True).items():
        setattr(candidate, column, value)
    try:
        db.commit()
        db.refresh(candidate)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating candidate")

    return {"success": True, "candidate": candidate_to_api(candidate)}


@router.delete("/{candidate_id:int}")
def delete_candidate(candidate_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    candidate = _get_candidate(db, candidate_id)
    try:
        db.delete(candidate)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "deleting candidate")

    logger.info("Candidate %s deleted by user %s", candidate_id, current["id"])
    return {"success": True, "deleted_candidate_id": candidate_id}


@router.get("/{candidate_id:int}/export")
def export_candidate(
    candidate_id: int,
    template: str | None = Query(default=None),
    logo: str | None = Query(default=None),
    current=Depends(staff_only),
    db: Session = Depends(get_db),
):
    record = candidate_to_api(_get_candidate(db, candidate_id))
    return pdf_response(record, user_id=current["id"], template=template, logo=logo)
