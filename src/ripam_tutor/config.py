"""Configuration settings for the quiz tutor."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

CONTENT_DIR = Path(__file__).parent / "content"

DB_PATH = os.getenv("RIPAM_TUTOR_DB", str(Path.home() / ".ripam_tutor" / "tutor.db"))
DATA_DIR = os.getenv("RIPAM_TUTOR_DATA", str(CONTENT_DIR))
LOG_LEVEL = os.getenv("RIPAM_TUTOR_LOG_LEVEL", "WARNING").upper()

# Exam settings
SIMULATION_MINUTES = 60
PASS_THRESHOLD = 21.0
STUDY_LIMIT = 20
