import logging
import os
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]

# Load environment variables from .env file
load_dotenv(REPO_ROOT / ".env")

log = logging.getLogger("tarot_decoder.config")

REVERSAL_MODES = ("soft", "strong")


def data_dir() -> Path:
    raw = os.getenv("TAROT_DATA_DIR")
    if not raw:
        return Path(__file__).resolve().parent / "data"
    p = Path(raw)
    if not p.is_absolute():
        p = REPO_ROOT / p
    return p


def default_reversal_mode() -> str:
    mode = (os.getenv("TAROT_REVERSAL_MODE") or "soft").strip().lower()
    if mode not in REVERSAL_MODES:
        log.warning("Ignoring TAROT_REVERSAL_MODE=%r, expected one of %s", mode, ", ".join(REVERSAL_MODES))
        return "soft"
    return mode
