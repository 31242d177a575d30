import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    api_key: str | None = os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-preview-04-17")
    proxy_path: str = os.getenv("PROXY_PATH", "/api/gemini-proxy")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
