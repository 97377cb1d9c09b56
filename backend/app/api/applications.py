import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.records import ApplicationSubmit
from ..services import application_lifecycle as lifecycle
from ..services.field_mapping import application_to_api, candidate_to_api
from ..utils.roles import staff_only
from .exports import pdf_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("/submit", status_code=201)
def submit_application(payload: ApplicationSubmit, db: Session = Depends(get_db)):
    application = lifecycle.submit_application(db, payload.to_payload())
    return {"success": True, "application": application_to_api(application)}


@router.get("")
def list_applications(
    status: str | None = Query(default=None),
    current=Depends(staff_only),
    db: Session = Depends(get_db),
):
    rows = lifecycle.list_applications(db, status)
    return {"success": True, "applications": [application_to_api(a) for a in rows]}


@router.get("/{application_id:int}")
def get_application(application_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    application = lifecycle.get_application(db, application_id)
    return {"success": True, "application": application_to_api(application)}


@router.post("/{application_id:int}/approve")
def approve_application(application_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    candidate = lifecycle.approve_application(db, application_id)
    logger.info("User %s approved application %s", current["id"], application_id)
    return {
        "success": True,
        "message": "Application approved and candidate created",
        "candidate": candidate_to_api(candidate),
    }


@router.post("/{application_id:int}/reject")
def reject_application(application_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    application = lifecycle.reject_application(db, application_id)
    return {
        "success": True,
        "message": "Application rejected",
        "application": application_to_api(application),
    }


@router.delete("/{application_id:int}")
def delete_application(application_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    lifecycle.delete_application(db, application_id)
    return {"success": True, "deleted_application_id": application_id}


@router.get("/{application_id:int}/export")
def export_application(
    application_id: int,
    template: str | None = Query(default=None),
    logo: str | None = Query(default=None),
    current=Depends(staff_only),
    db: Session = Depends(get_db),
):
    record = application_to_api(lifecycle.get_application(db, application_id))
    return pdf_response(record, user_id=current["id"], template=template, logo=logo)
