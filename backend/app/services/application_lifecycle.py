"""
Application lifecycle: pending -> approved | rejected.

Approval materializes a Candidate from the application's personal fields. The
status flip and the candidate insert share one transaction, so a failed insert
(e.g. a candidate with that email already exists) leaves the application
pending.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.application import Application
from ..models.candidate import Candidate
from ..utils.error_handlers import ConflictError, NotFoundError, get_error_message, handle_database_error
from ..utils.validation import APPLICATION_STATUSES, validate_choice
from .field_mapping import APPLICATION_FIELDS, application_to_candidate, to_storage

logger = logging.getLogger(__name__)


def submit_application(db: Session, data: dict) -> Application:
    """Store a public submission. Status is always ``pending``."""
    row = to_storage(APPLICATION_FIELDS, data)
    application = Application(**row, status="pending")
    try:
        db.add(application)
        db.commit()
        db.refresh(application)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "submitting application")

    logger.info("Application %s submitted for %s", application.id, application.email)
    return application


def list_applications(db: Session, status: str | None = None) -> list[Application]:
    status = validate_choice(status, "status", APPLICATION_STATUSES)
    q = db.query(Application)
    if status:
        q = q.filter(Application.status == status)
    return q.order_by(Application.created_at.desc(), Application.id.desc()).all()


def get_application(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFoundError(get_error_message("application_not_found"))
    return application


def approve_application(db: Session, application_id: int) -> Candidate:
    """Approve a pending application and create its Candidate atomically."""
    try:
        application = (
            db.query(Application)
            .filter(Application.id == application_id, Application.status == "pending")
            .with_for_update()
            .first()
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "loading application")

    if not application:
        db.rollback()
        raise NotFoundError("Application not found or not in pending status")

    candidate = Candidate(**application_to_candidate(application), status="active")
    application.status = "approved"
    application.updated_at = datetime.now(timezone.utc)
    try:
        db.add(candidate)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Approval of application %s rolled back: %s", application_id, e.orig)
        raise ConflictError(get_error_message("candidate_exists"))
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "approving application")

    db.refresh(candidate)
    logger.info("Application %s approved as candidate %s", application_id, candidate.id)
    return candidate


def reject_application(db: Session, application_id: int) -> Application:
    """Reject a pending application.

    Rejecting an already rejected application is a no-op; an approved one
    cannot be rejected.
    """
    application = get_application(db, application_id)
    if application.status == "rejected":
        return application
    if application.status == "approved":
        raise ConflictError(get_error_message("application_already_approved"))

    application.status = "rejected"
    application.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
        db.refresh(application)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "rejecting application")

    logger.info("Application %s rejected", application_id)
    return application


def delete_application(db: Session, application_id: int) -> None:
    application = get_application(db, application_id)
    try:
        db.delete(application)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "deleting application")
    logger.info("Application %s deleted", application_id)
