from __future__ import annotations

import os
from pathlib import Path

FIELD_TYPES = ("text", "textarea", "dropdown", "checkbox", "date", "email", "phone", "number")

DEFAULT_LABELS = {
    "text": "Text Input",
    "textarea": "Text Area",
    "dropdown": "Dropdown",
    "checkbox": "Checkbox",
    "date": "Date Picker",
    "email": "Email Address",
    "phone": "Phone Number",
    "number": "Number Input",
}

DEFAULT_FORM_NAME = "Untitled Form"
SESSION_KEY_PREFIX = "form-builder-"


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.storage_backend = os.getenv("STORAGE_BACKEND", "sqlite").lower()
        self.sqlite_path = Path(os.getenv("SQLITE_PATH", "./data/app.db"))
        self.json_path = Path(os.getenv("JSON_PATH", "./data/jsonstore.json"))
        self.session_store_path = Path(os.getenv("SESSION_STORE_PATH", "./data/sessions.json"))
        self.api_base_url = os.getenv("API_BASE_URL", "http://127.0.0.1:8000/api")
        self.autosave_delay = _float_env("AUTOSAVE_DELAY", 0.5)
        self.session_max_age_hours = _float_env("SESSION_MAX_AGE_HOURS", 24.0)
        self.host = os.getenv("HOST", "0.0.0.0")
        port_value = os.getenv("PORT", "8000")
        try:
            self.port = int(port_value)
        except ValueError:
            self.port = 8000


def ensure_dirs(settings: Settings) -> None:
    settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)
    settings.session_store_path.parent.mkdir(parents=True, exist_ok=True)
