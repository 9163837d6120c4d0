from pydantic import BaseModel
import os
from dotenv import load_dotenv
load_dotenv()  # carga el archivo .env de la raíz

class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "CareConnect Bookings")
    env: str = os.getenv("APP_ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # API del marketplace (backend Express) al que reenviamos las peticiones
    api_base_url: str = os.getenv("API_BASE_URL", "http://localhost:5000/api")
    api_timeout_seconds: float = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
    enrichment_concurrency: int = int(os.getenv("ENRICHMENT_CONCURRENCY", "5"))
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me")
    frontend_base_url: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:8081")


_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
