"""
PDF resume rendering.

``build_resume_data`` turns a camelCase candidate/application record into the
exporter's data shape; ``render_resume`` lays that out as an A4 PDF with
ReportLab using one of the named templates.
"""
import logging
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import HRFlowable, Image, Paragraph, SimpleDocTemplate, Spacer

from ..config import DEFAULT_RESUME_TEMPLATE
from ..utils.error_handlers import AppError, ValidationError, get_error_message
from .field_mapping import coerce_string_list, decode_json

logger = logging.getLogger(__name__)

_BULLET_SPLIT = re.compile(r"[•\-*]")
_EMBEDDABLE_LOGOS = {".png", ".jpg", ".jpeg", ".gif"}


@dataclass(frozen=True)
class ResumeTemplate:
    name: str
    label: str
    heading_color: str
    accent_color: str
    text_color: str = "#4b5563"
    muted_color: str = "#6b7280"
    heading_font: str = "Helvetica-Bold"
    body_font: str = "Helvetica"
    centered_header: bool = False
    section_rule: bool = True
    skills_inline: bool = True


TEMPLATES: dict[str, ResumeTemplate] = {
    "modernProfessional": ResumeTemplate(
        name="modernProfessional",
        label="Modern Professional",
        heading_color="#2c3242",
        accent_color="#73b729",
    ),
    "executiveStyle": ResumeTemplate(
        name="executiveStyle",
        label="Executive Style",
        heading_color="#2c3242",
        accent_color="#2c3242",
        heading_font="Times-Bold",
        body_font="Times-Roman",
        centered_header=True,
    ),
    "creativeProfessional": ResumeTemplate(
        name="creativeProfessional",
        label="Creative Professional",
        heading_color="#73b729",
        accent_color="#2c3242",
        section_rule=False,
        skills_inline=False,
    ),
}


def get_template(name: str | None) -> ResumeTemplate:
    key = (name or DEFAULT_RESUME_TEMPLATE or "modernProfessional").strip()
    template = TEMPLATES.get(key)
    if template is None:
        raise ValidationError(
            f"{get_error_message('unknown_template')}: {key}",
            details={"available": sorted(TEMPLATES)},
        )
    return template


def _split_bullets(text: str) -> list[str]:
    # Short fragments are usually date ranges or hyphenated words, not bullets.
    return [b.strip() for b in _BULLET_SPLIT.split(text) if len(b.strip()) > 10]


def _as_lines(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        bullets = _split_bullets(value)
        return bullets or ([value.strip()] if value.strip() else [])
    if not isinstance(value, (list, tuple)):
        return [_text(value)] if _text(value) else []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _text(value) -> str:
    return str(value if value is not None else "").strip()


def _join_years(start, end) -> str:
    start = str(start or "").strip()
    end = str(end or "").strip()
    if start and end:
        return f"{start} - {end}"
    return start or end


def _experience_entries(raw, fallback_title: str) -> list[dict]:
    value = decode_json(raw)
    if not value:
        return []
    if isinstance(value, str):
        return [{
            "title": fallback_title or "Professional",
            "company": "",
            "startDate": "",
            "endDate": "",
            "description": _as_lines(value),
        }]
    entries = []
    for item in value if isinstance(value, list) else [value]:
        if not isinstance(item, dict):
            continue
        entries.append({
            "title": _text(item.get("title") or item.get("jobTitle")),
            "company": _text(item.get("company")),
            "startDate": str(item.get("startDate") or item.get("yearFrom") or ""),
            "endDate": str(item.get("endDate") or item.get("yearTo") or "Present"),
            "description": _as_lines(item.get("description") or item.get("responsibilities")),
        })
    return entries


def _education_entries(raw) -> list[dict]:
    value = decode_json(raw)
    if not value:
        return []
    if isinstance(value, str):
        return [{"degree": value.strip(), "institution": "", "graduationDate": ""}]
    entries = []
    for item in value if isinstance(value, list) else [value]:
        if not isinstance(item, dict):
            continue
        entries.append({
            "degree": _text(item.get("degree") or item.get("subject")),
            "institution": _text(item.get("institution")),
            "graduationDate": str(
                item.get("graduationDate") or _join_years(item.get("yearFrom"), item.get("yearTo"))
            ),
        })
    return entries


def _labelled_list(raw, name_key: str, extra_key: str) -> list[str]:
    value = decode_json(raw)
    if not value:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    out = []
    for item in value if isinstance(value, list) else [value]:
        if isinstance(item, dict):
            label = str(item.get(name_key) or "").strip()
            extra = str(item.get(extra_key) or "").strip()
            if label:
                out.append(f"{label} ({extra})" if extra else label)
        elif item:
            out.append(str(item))
    return out


def build_resume_data(record: dict) -> dict:
    """Exporter data shape from a camelCase candidate or application record."""
    position = record.get("currentPosition") or record.get("position") or ""
    return {
        "firstName": record.get("firstName") or "",
        "lastName": record.get("lastName") or "",
        "email": record.get("email") or "",
        "phone": record.get("phone") or "",
        "location": record.get("location") or "",
        "currentPosition": position,
        "linkedinUrl": record.get("linkedinUrl") or "",
        "summary": record.get("summary") or record.get("coverLetter") or "",
        "skills": coerce_string_list(record.get("skills")),
        "experience": _experience_entries(record.get("experience"), position),
        "education": _education_entries(record.get("education")),
        "languages": _labelled_list(record.get("languages"), "language", "proficiency"),
        "certifications": _labelled_list(record.get("certifications"), "name", "year"),
    }


def resume_filename(data: dict) -> str:
    stem = "_".join(p for p in (data.get("firstName"), data.get("lastName")) if p) or "candidate"
    stem = re.sub(r"[^A-Za-z0-9_]+", "_", stem).strip("_") or "candidate"
    return f"{stem}_resume.pdf"


def _styles(template: ResumeTemplate) -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    align = TA_CENTER if template.centered_header else TA_LEFT
    heading = colors.HexColor(template.heading_color)
    return {
        "name": ParagraphStyle(
            "ResumeName", parent=base["Title"], fontName=template.heading_font,
            fontSize=24, leading=28, textColor=heading, alignment=align, spaceAfter=4,
        ),
        "position": ParagraphStyle(
            "ResumePosition", parent=base["Normal"], fontName=template.body_font,
            fontSize=14, leading=18, textColor=colors.HexColor(template.text_color), alignment=align,
        ),
        "contact": ParagraphStyle(
            "ResumeContact", parent=base["Normal"], fontName=template.body_font,
            fontSize=9, leading=12, textColor=colors.HexColor(template.muted_color), alignment=align,
        ),
        "section": ParagraphStyle(
            "ResumeSection", parent=base["Heading2"], fontName=template.heading_font,
            fontSize=13, leading=16, textColor=heading, spaceBefore=10, spaceAfter=4,
        ),
        "entry_title": ParagraphStyle(
            "ResumeEntryTitle", parent=base["Normal"], fontName=template.heading_font,
            fontSize=11, leading=14, textColor=colors.HexColor(template.heading_color),
        ),
        "entry_meta": ParagraphStyle(
            "ResumeEntryMeta", parent=base["Normal"], fontName=template.body_font,
            fontSize=9, leading=12, textColor=colors.HexColor(template.muted_color), spaceAfter=2,
        ),
        "body": ParagraphStyle(
            "ResumeBody", parent=base["Normal"], fontName=template.body_font,
            fontSize=10, leading=13, textColor=colors.HexColor(template.text_color),
        ),
        "bullet": ParagraphStyle(
            "ResumeBullet", parent=base["Normal"], fontName=template.body_font,
            fontSize=10, leading=13, leftIndent=10, textColor=colors.HexColor(template.text_color),
        ),
    }


def _logo_flowable(logo_path: str | None):
    if not logo_path:
        return None
    path = Path(logo_path)
    if not path.is_file():
        logger.warning("Resume logo not found: %s", logo_path)
        return None
    if path.suffix.lower() not in _EMBEDDABLE_LOGOS:
        logger.info("Skipping non-raster resume logo %s", path.name)
        return None
    return Image(str(path), width=40 * mm, height=15 * mm, kind="proportional")


def render_resume(data: dict, template: str | None = None, logo_path: str | None = None) -> bytes:
    """Render resume data to PDF bytes. Pure apart from reading the logo file."""
    tpl = get_template(template)
    st = _styles(tpl)
    accent = colors.HexColor(tpl.accent_color)
    story = []

    def section(title: str) -> None:
        story.append(Paragraph(escape(title), st["section"]))
        if tpl.section_rule:
            story.append(HRFlowable(width="100%", thickness=1, color=accent, spaceAfter=4))

    logo = _logo_flowable(logo_path)
    if logo is not None:
        story.append(logo)
        story.append(Spacer(1, 6))

    full_name = f"{data.get('firstName', '')} {data.get('lastName', '')}".strip() or "Candidate"
    story.append(Paragraph(escape(full_name), st["name"]))
    if data.get("currentPosition"):
        story.append(Paragraph(escape(data["currentPosition"]), st["position"]))
    contact = [data.get(k) for k in ("email", "phone", "location", "linkedinUrl") if data.get(k)]
    if contact:
        story.append(Paragraph(escape("  |  ".join(contact)), st["contact"]))
    story.append(HRFlowable(width="100%", thickness=2, color=accent, spaceBefore=6, spaceAfter=6))

    if data.get("summary"):
        section("Professional Summary")
        story.append(Paragraph(escape(data["summary"]), st["body"]))

    skills = data.get("skills") or []
    if skills:
        section("Skills")
        if tpl.skills_inline:
            story.append(Paragraph(escape("  •  ".join(skills)), st["body"]))
        else:
            for skill in skills:
                story.append(Paragraph("• " + escape(skill), st["bullet"]))

    experience = data.get("experience") or []
    if experience:
        section("Work Experience")
        for exp in experience:
            story.append(Paragraph(escape(_text(exp.get("title"))), st["entry_title"]))
            meta = " | ".join(p for p in (_text(exp.get("company")), _join_years(exp.get("startDate"), exp.get("endDate"))) if p)
            if meta:
                story.append(Paragraph(escape(meta), st["entry_meta"]))
            for line in exp.get("description") or []:
                story.append(Paragraph("• " + escape(line), st["bullet"]))
            story.append(Spacer(1, 6))

    education = data.get("education") or []
    if education:
        section("Education")
        for edu in education:
            story.append(Paragraph(escape(_text(edu.get("degree"))), st["entry_title"]))
            meta = " | ".join(p for p in (_text(edu.get("institution")), _text(edu.get("graduationDate"))) if p)
            if meta:
                story.append(Paragraph(escape(meta), st["entry_meta"]))
            story.append(Spacer(1, 4))

    for title, key in (("Languages", "languages"), ("Certifications", "certifications")):
        items = data.get(key) or []
        if items:
            section(title)
            for item in items:
                story.append(Paragraph("• " + escape(item), st["bullet"]))

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        title=f"{full_name} - Resume",
        author="TalentForge",
    )
    try:
        doc.build(story)
    except Exception as e:
        logger.exception("Resume rendering failed for %s: %s", full_name, e)
        raise AppError(get_error_message("export_failed"), status_code=500)
    return buf.getvalue()
