"""
Single translation layer between API payloads and storage rows.

API payloads use lowerCamelCase keys (``firstName``), the tables use snake_case
columns (``first_name``). Nested collections (experience, education, languages,
certifications) live in TEXT columns as JSON strings; ``skills`` is a JSON array
column. Every storage-facing operation goes through ``to_storage`` / ``to_api``
instead of re-deriving the names per endpoint.
"""
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

from ..utils.error_handlers import ValidationError

logger = logging.getLogger(__name__)

TEXT = "text"
JSON_TEXT = "json"
STRING_LIST = "list"
AVAILABILITY = "availability"
VALUE = "value"  # stored as given, None falls back to FieldSpec.default


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True)
class FieldSpec:
    column: str
    api: str
    kind: str = TEXT
    required: bool = False
    default: Any = None


def field(column: str, kind: str = TEXT, *, required: bool = False, default: Any = None, api: str | None = None) -> FieldSpec:
    return FieldSpec(column=column, api=api or snake_to_camel(column), kind=kind, required=required, default=default)


CANDIDATE_FIELDS: tuple[FieldSpec, ...] = (
    field("first_name", required=True),
    field("last_name", required=True),
    field("email", required=True),
    field("phone"),
    field("location"),
    field("current_position"),
    field("profile"),
    field("experience", JSON_TEXT),
    field("education", JSON_TEXT),
    field("skills", STRING_LIST),
    field("languages", JSON_TEXT),
    field("certifications", JSON_TEXT),
    field("hobbies"),
    field("birth_date"),
    field("summary"),
    field("notes"),
    field("availability", AVAILABILITY),
    field("linkedin_url"),
    field("status", VALUE, default="active"),
    field("resume_path"),
)

# Status is owned by the lifecycle, never by the submitter.
APPLICATION_FIELDS: tuple[FieldSpec, ...] = (
    field("first_name", required=True),
    field("last_name", required=True),
    field("email", required=True),
    field("phone"),
    field("current_position"),
    field("profile"),
    field("experience", JSON_TEXT),
    field("education", JSON_TEXT),
    field("skills", STRING_LIST),
    field("languages", JSON_TEXT),
    field("certifications", JSON_TEXT),
    field("hobbies"),
    field("birth_date"),
    field("summary"),
    field("availability", AVAILABILITY),
    field("cover_letter"),
    field("resume_path"),
)

CLIENT_FIELDS: tuple[FieldSpec, ...] = (
    field("name", required=True),
    field("contact_person"),
    field("contact_function"),
    field("email", required=True),
    field("phone"),
    field("address"),
    field("industry"),
    field("status", VALUE, default="active"),
    field("notes"),
    field("vat_number"),
)

# password_hash never crosses the API boundary.
USER_FIELDS: tuple[FieldSpec, ...] = (
    field("username", required=True),
    field("email", required=True),
    field("first_name", required=True),
    field("last_name", required=True),
    field("role", VALUE, default="user"),
    field("password_change_required", VALUE, default=False),
)

# Alternate inbound names sent by the public forms.
INBOUND_ALIASES = {
    "workExperience": "experience",
    "isAvailable": "availability",
}

# Columns copied from an approved Application into the new Candidate.
APPROVAL_COPY_COLUMNS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "current_position",
    "profile",
    "skills",
    "experience",
    "education",
    "certifications",
    "languages",
    "hobbies",
    "birth_date",
    "summary",
    "availability",
    "resume_path",
)

_META_COLUMNS = ("status", "created_at", "updated_at")


def encode_json(value: Any) -> str | None:
    """JSON-encode a nested structure unless it is already a string."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def decode_json(value: Any) -> Any:
    """Best-effort inverse of ``encode_json``; free text comes back unchanged."""
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    if text[0] in "[{\"" or text in ("null", "true", "false"):
        try:
            return json.loads(text)
        except ValueError:
            return value
    return value


def coerce_string_list(value: Any) -> list[str]:
    """``"JS, SQL"`` and ``["JS", "SQL"]`` both become ``["JS", "SQL"]``."""
    if value is None:
        return []
    if isinstance(value, str):
        decoded = decode_json(value)
        if isinstance(decoded, list):
            value = decoded
        else:
            return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    raise ValidationError("skills must be a list of strings or a comma-separated string")


def normalize_availability(value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, str) and value.strip().lower() in {"yes", "true", "1"}:
        return "yes"
    return "no"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _default_for(fs: FieldSpec) -> Any:
    if fs.kind == JSON_TEXT:
        return "[]"
    if fs.kind == STRING_LIST:
        return []
    if fs.kind == AVAILABILITY:
        return "no"
    if fs.kind == VALUE:
        return fs.default
    return ""


def _encode(fs: FieldSpec, value: Any) -> Any:
    if fs.kind == JSON_TEXT:
        return _default_for(fs) if value is None else encode_json(value)
    if fs.kind == STRING_LIST:
        return coerce_string_list(value)
    if fs.kind == AVAILABILITY:
        return normalize_availability(value)
    if fs.kind == VALUE:
        return fs.default if value is None else value
    if value is None:
        return ""
    text = str(value)
    return text.strip() if fs.required else text


def normalize_inbound_keys(fields: Iterable[FieldSpec], data: dict) -> dict:
    """Re-key an inbound payload by API name.

    Accepts the API name, the column name or a known alias; the API name wins
    when both are present.
    """
    by_column = {}
    field_specs = tuple(fields)
    for fs in field_specs:
        by_column[fs.column] = fs.api
        by_column[fs.api] = fs.api

    out: dict[str, Any] = {}
    for key, value in data.items():
        target = by_column.get(key)
        if target is None and key in INBOUND_ALIASES:
            target = by_column.get(INBOUND_ALIASES[key])
        if target is None:
            continue
        if target in out and key != target:
            continue
        out[target] = value
    return out


def to_storage(fields: Iterable[FieldSpec], data: dict, *, partial: bool = False) -> dict:
    """Map an API payload onto column values.

    Full mapping (create) validates required fields and fills defaults for
    every absent optional field. Partial mapping (update) only touches the
    fields present in ``data``; required fields may be omitted but not blanked.
    """
    field_specs = tuple(fields)
    payload = normalize_inbound_keys(field_specs, data or {})

    if partial:
        blanked = [s.api for s in field_specs if s.required and s.api in payload and _is_blank(payload[s.api])]
        if blanked:
            raise ValidationError(f"Required field(s) cannot be empty: {', '.join(blanked)}")
    else:
        missing = [s.api for s in field_specs if s.required and _is_blank(payload.get(s.api))]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    row: dict[str, Any] = {}
    for fs in field_specs:
        if fs.api in payload:
            row[fs.column] = _encode(fs, payload[fs.api])
        elif not partial:
            row[fs.column] = _default_for(fs)
    return row


def _api_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def to_api(fields: Iterable[FieldSpec], row: Any) -> dict:
    """Expose a stored row with camelCase keys.

    JSON text columns are returned as stored; decoding is up to the caller.
    """
    out: dict[str, Any] = {"id": row.id}
    field_specs = tuple(fields)
    seen = set()
    for fs in field_specs:
        value = getattr(row, fs.column, None)
        if fs.kind == STRING_LIST and value is None:
            value = []
        out[fs.api] = _api_value(value)
        seen.add(fs.column)
    for column in _META_COLUMNS:
        if column not in seen and hasattr(row, column):
            out[snake_to_camel(column)] = _api_value(getattr(row, column))
    return out


def candidate_to_api(candidate) -> dict:
    return to_api(CANDIDATE_FIELDS, candidate)


def application_to_api(application) -> dict:
    return to_api(APPLICATION_FIELDS, application)


def client_to_api(client) -> dict:
    return to_api(CLIENT_FIELDS, client)


def user_to_api(user) -> dict:
    return to_api(USER_FIELDS, user)


def application_to_candidate(application) -> dict:
    """Column values for the Candidate derived from an approved Application."""
    row = {column: getattr(application, column, None) for column in APPROVAL_COPY_COLUMNS}
    row["skills"] = list(row.get("skills") or [])
    row["availability"] = normalize_availability(row.get("availability"))
    for column in ("experience", "education", "certifications", "languages"):
        row[column] = encode_json(row[column]) if row[column] is not None else "[]"
    logger.debug("Derived candidate columns from application %s", getattr(application, "id", None))
    return row
