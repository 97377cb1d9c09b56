import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..config import DEFAULT_RESUME_TEMPLATE
from ..schemas.records import ResumeExportRequest
from ..services.resume_export import TEMPLATES, build_resume_data, render_resume, resume_filename
from ..services.template_settings import load_settings, resolve_logo_path
from ..utils.roles import staff_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exports", tags=["Exports"])


def resolve_export_options(user_id: int, template: str | None, logo: str | None) -> tuple[str, str | None]:
    """Explicit choice first, then the user's saved settings, then defaults."""
    settings = load_settings(user_id) or {}
    template_name = template or settings.get("templateStyle") or DEFAULT_RESUME_TEMPLATE
    logo_path = resolve_logo_path(logo or settings.get("logoFile"))
    return template_name, logo_path


def pdf_response(record: dict, *, user_id: int, template: str | None, logo: str | None) -> Response:
    template_name, logo_path = resolve_export_options(user_id, template, logo)
    data = build_resume_data(record)
    pdf = render_resume(data, template_name, logo_path)
    filename = resume_filename(data)
    logger.info("Exported resume %s with template %s", filename, template_name)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/templates")
def list_resume_templates(current=Depends(staff_only)):
    return {
        "success": True,
        "default": DEFAULT_RESUME_TEMPLATE,
        "templates": [{"name": t.name, "label": t.label} for t in TEMPLATES.values()],
    }


@router.post("/resume")
def export_resume(
    payload: ResumeExportRequest,
    template: str | None = Query(default=None),
    logo: str | None = Query(default=None),
    current=Depends(staff_only),
):
    return pdf_response(payload.to_payload(), user_id=current["id"], template=template, logo=logo)
