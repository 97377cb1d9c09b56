import json
import logging
from pathlib import Path

from ..config import UPLOAD_DIR

logger = logging.getLogger(__name__)

LOGO_SUBDIR = "logos"
TEMPLATE_SUBDIR = "templates"
SETTINGS_SUBDIR = "settings"


def upload_root() -> Path:
    return Path(UPLOAD_DIR)


def upload_subdir(name: str) -> Path:
    path = upload_root() / name
    path.mkdir(parents=True, exist_ok=True)
    return path


def public_url(subdir: str, file_name: str) -> str:
    return f"/uploads/{subdir}/{file_name}"


def _settings_path(user_id: int) -> Path:
    return upload_subdir(SETTINGS_SUBDIR) / f"template-settings-{int(user_id)}.json"


def save_settings(user_id: int, settings: dict) -> dict:
    path = _settings_path(user_id)
    path.write_text(json.dumps(settings, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved template settings for user %s", user_id)
    return settings


def load_settings(user_id: int) -> dict | None:
    """Saved settings for a user, or None when nothing was saved yet."""
    path = _settings_path(user_id)
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Unreadable template settings %s: %s", path.name, e)
        return None


def list_uploaded_templates() -> list[dict]:
    folder = upload_subdir(TEMPLATE_SUBDIR)
    return [
        {"name": p.name, "url": public_url(TEMPLATE_SUBDIR, p.name)}
        for p in sorted(folder.iterdir())
        if p.is_file()
    ]


def resolve_logo_path(file_name: str | None) -> str | None:
    """Path of an uploaded logo by its stored file name; None if missing."""
    if not file_name:
        return None
    # Stored names are "<uuid><ext>"; also accept the full /uploads/logos/... URL.
    name = Path(str(file_name)).name
    path = upload_subdir(LOGO_SUBDIR) / name
    if not path.is_file():
        logger.warning("Requested logo %s does not exist", name)
        return None
    return path.as_posix()
