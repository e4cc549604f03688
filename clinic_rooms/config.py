import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Clinic opening hours (day grid)
OPENING_HOUR = int(os.getenv("CLINIC_OPENING_HOUR", "8"))
CLOSING_HOUR = int(os.getenv("CLINIC_CLOSING_HOUR", "20"))
SLOT_DURATION_MINUTES = int(os.getenv("CLINIC_SLOT_DURATION_MINUTES", "30"))

LOG_LEVEL = os.getenv("CLINIC_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
	"""Attach a basic handler to the package logger (for scripts and the shell)."""
	logger = logging.getLogger("clinic_rooms")
	logger.setLevel(level)
	if not logger.handlers:
		handler = logging.StreamHandler()
		handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
		logger.addHandler(handler)
