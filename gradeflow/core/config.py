from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    APP_NAME: str = "Gradeflow"
    AUTH_MODE: Literal["firebase", "mock"] = "mock"

    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_SERVICE_KEY: str = ""

    FIREBASE_CREDENTIALS_PATH: str = "./firebase-credentials.json"

    CORS_ORIGINS: str = "http://localhost:3000"

    LOG_LEVEL: str = "INFO"

    AUDIT_LOG_ENABLED: bool = True
    AUDIT_LOG_TABLE: str = "activity_logs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
