import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.client import Client
from ..schemas.records import ClientCreate, ClientLead, ClientUpdate
from ..services.field_mapping import CLIENT_FIELDS, client_to_api, to_storage
from ..utils.error_handlers import NotFoundError, get_error_message, handle_database_error
from ..utils.roles import staff_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def _get_client(db: Session, client_id: int) -> Client:
    try:
        client = db.query(Client).filter(Client.id == client_id).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "loading client")
    if not client:
        raise NotFoundError(get_error_message("client_not_found"))
    return client


def _insert(db: Session, data: dict, operation: str) -> Client:
    client = Client(**to_storage(CLIENT_FIELDS, data))
    try:
        db.add(client)
        db.commit()
        db.refresh(client)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, operation)
    return client


@router.get("")
def list_clients(current=Depends(staff_only), db: Session = Depends(get_db)):
    try:
        rows = db.query(Client).order_by(Client.created_at.desc(), Client.id.desc()).all()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "listing clients")
    return {"success": True, "clients": [client_to_api(c) for c in rows]}


@router.post("", status_code=201)
def create_client(payload: ClientCreate, current=Depends(staff_only), db: Session = Depends(get_db)):
    client = _insert(db, payload.to_payload(), "creating client")
    logger.info("Client %s created by user %s", client.id, current["id"])
    return {"success": True, "client": client_to_api(client)}


@router.post("/lead", status_code=201)
def submit_lead(payload: ClientLead, db: Session = Depends(get_db)):
    client = _insert(db, payload.to_client_payload(), "submitting client lead")
    logger.info("Client lead %s received (%s)", client.id, client.status)
    return {"success": True, "client": client_to_api(client)}


@router.get("/{client_id:int}")
def get_client(client_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    return {"success": True, "client": client_to_api(_get_client(db, client_id))}


@router.put("/{client_id:int}")
def update_client(client_id: int, payload: ClientUpdate, current=Depends(staff_only), db: Session = Depends(get_db)):
    client = _get_client(db, client_id)
    for column, value in to_storage(CLIENT_FIELDS, payload.to_payload(), partial=True).items():
        setattr(client, column, value)
    try:
        db.commit()
        db.refresh(client)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating client")

    return {"success": True, "client": client_to_api(client)}


@router.delete("/{client_id:int}")
def delete_client(client_id: int, current=Depends(staff_only), db: Session = Depends(get_db)):
    client = _get_client(db, client_id)
    try:
        db.delete(client)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "deleting client")

    logger.info("Client %s deleted by user %s", client_id, current["id"])
    return {"success": True, "deleted_client_id": client_id}
