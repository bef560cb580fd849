"""Environment-driven settings for the AI service and search grounding."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from jobhunt.log import get_logger

log = get_logger(__name__)

ROOT: Path = Path(__file__).resolve().parent.parent
ENV_PATH: Path = ROOT / ".env"

load_dotenv(ENV_PATH)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.5-flash"

ACCEPTED_MIME_TYPES: tuple[str, ...] = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/webp",
)

MAX_JOB_RESULTS = 6

# Keys the sidebar is allowed to write back to .env
EDITABLE_KEYS: tuple[str, ...] = ("AI_API_KEY", "AI_BASE_URL", "AI_MODEL", "SERPAPI_KEY")


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def get_api_key() -> str:
    """AI service key; the first of AI_API_KEY, GEMINI_API_KEY, API_KEY that is set."""
    for key in ("AI_API_KEY", "GEMINI_API_KEY", "API_KEY"):
        value = get_env(key)
        if value:
            return value
    log.warning("AI API key is missing. The app will not function correctly.")
    return ""


def get_base_url() -> str:
    return get_env("AI_BASE_URL") or DEFAULT_BASE_URL


def get_model() -> str:
    return get_env("AI_MODEL") or DEFAULT_MODEL


def get_search_key() -> str:
    return get_env("SERPAPI_KEY")


def load_env_file(path: Path | None = None) -> dict[str, str]:
    """Parse KEY=VALUE lines from the .env file (missing file → empty dict)."""
    path = path or ENV_PATH
    values: dict[str, str] = {}
    if path.exists():
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, _, v = line.partition("=")
                values[k.strip()] = v.strip()
    return values


def save_env_file(values: dict[str, str], path: Path | None = None) -> Path:
    """Merge *values* into the .env file, keeping unrelated lines in place."""
    path = path or ENV_PATH
    lines: list[str] = []
    written: set[str] = set()

    if path.exists():
        for line in path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                k = stripped.partition("=")[0].strip()
                if k in values:
                    lines.append(f"{k}={values[k]}")
                    written.add(k)
                    continue
            lines.append(line)

    for k, v in values.items():
        if k not in written:
            lines.append(f"{k}={v}")

    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    log.info("Settings written → %s", path)
    return path


def apply_env(values: dict[str, str]) -> None:
    """Expose *values* to the running process (non-empty ones only)."""
    for k, v in values.items():
        if v:
            os.environ[k] = v
