from pathlib import Path
from uuid import uuid4
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..config import MAX_UPLOAD_BYTES
from ..schemas.records import CamelModel
from ..services.resume_export import TEMPLATES
from ..services.template_settings import (
    LOGO_SUBDIR,
    TEMPLATE_SUBDIR,
    list_uploaded_templates,
    load_settings,
    public_url,
    save_settings,
    upload_subdir,
)
from ..utils.error_handlers import FileUploadError, get_error_message, handle_file_upload_error
from ..utils.roles import staff_only
from ..utils.validation import sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])

ALLOWED_LOGO_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"}
ALLOWED_TEMPLATE_EXTENSIONS = {".pdf", ".docx", ".doc", ".html", ".json", ".png", ".jpg", ".jpeg"}


class TemplateSettings(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    template_style: str | None = None
    logo_file: str | None = None
    company_name: str | None = None
    primary_color: str | None = None
    accent_color: str | None = None

    @field_validator("template_style")
    @classmethod
    def _known_template(cls, v: str | None) -> str | None:
        if v is not None and v not in TEMPLATES:
            raise ValueError(f"Unknown template. Must be one of: {', '.join(TEMPLATES)}")
        return v


async def _store_upload(file: UploadFile, *, subdir: str, allowed: set[str]) -> dict:
    if not file or not file.filename:
        raise FileUploadError(get_error_message("no_file"))

    original_filename = sanitize_filename(Path(file.filename).name)
    ext = Path(original_filename).suffix.lower()
    if ext not in allowed:
        raise FileUploadError(get_error_message("invalid_file_type"), details={"allowed": sorted(allowed)})

    stored_filename = f"{uuid4().hex}{ext}"
    dest = upload_subdir(subdir) / stored_filename

    size = 0
    try:
        with open(dest, "wb") as out:
            while True:
                chunk = await file.read(1024 * 1024)
                if not chunk:
                    break
                size += len(chunk)
                if size > MAX_UPLOAD_BYTES:
                    raise HTTPException(status_code=413, detail=get_error_message("file_too_large"))
                out.write(chunk)
    except Exception as e:
        dest.unlink(missing_ok=True)
        raise handle_file_upload_error(e, original_filename)

    logger.info("Stored %s upload %s (%d bytes)", subdir, stored_filename, size)
    return {
        "success": True,
        "fileUrl": public_url(subdir, stored_filename),
        "fileName": stored_filename,
        "originalName": original_filename,
    }


@router.post("/upload/logo")
async def upload_logo(logo: UploadFile = File(...), current=Depends(staff_only)):
    result = await _store_upload(logo, subdir=LOGO_SUBDIR, allowed=ALLOWED_LOGO_EXTENSIONS)
    return {"message": "Logo uploaded successfully", **result}


@router.post("/upload/template")
async def upload_template(template: UploadFile = File(...), current=Depends(staff_only)):
    result = await _store_upload(template, subdir=TEMPLATE_SUBDIR, allowed=ALLOWED_TEMPLATE_EXTENSIONS)
    return {"message": "Template uploaded successfully", **result}


@router.get("/templates")
def list_templates(current=Depends(staff_only)):
    return {"success": True, "templates": list_uploaded_templates()}


@router.post("/templates/settings")
def save_template_settings(payload: TemplateSettings, current=Depends(staff_only)):
    settings = save_settings(current["id"], payload.model_dump(by_alias=True, exclude_none=True))
    return {"success": True, "message": "Template settings saved successfully", "settings": settings}


@router.get("/templates/settings")
def get_template_settings(current=Depends(staff_only)):
    settings = load_settings(current["id"])
    if settings is None:
        raise HTTPException(status_code=404, detail=get_error_message("template_settings_not_found"))
    return {"success": True, "settings": settings}
