# innervoice configuration
# loads env vars for mongodb, gemini, and note pipeline limits

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # mongodb
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "innervoice_db")
    MONGODB_TIMEOUT_MS: int = 5000

    # gemini (note analysis and expansion)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_TEMPERATURE: float = 0.7
    GEMINI_MAX_OUTPUT_TOKENS: int = 2048
    GEMINI_TIMEOUT_SECONDS: float = 30.0
    GEMINI_MAX_RETRIES: int = 1

    # cors
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # notes
    NOTE_MAX_LENGTH: int = 500
    NOTE_LIST_DEFAULT_LIMIT: int = 50
    NOTE_LIST_MAX_LIMIT: int = 200
    CONTEXT_NOTES_LIMIT: int = 10
    RELATED_NOTES_LIMIT: int = 5
    ANALYTICS_SCAN_LIMIT: int = 500

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
