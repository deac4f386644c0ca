import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "Qarze Hasana Microfinance Portal"
    MONGODB_URI: str = os.getenv("MONGODB_URI")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME")
    MONGODB_TLS: bool = _env_bool("MONGODB_TLS")
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:3000")
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))
    TOKEN_PREFIX: str = os.getenv("TOKEN_PREFIX", "SWF")
    DEFAULT_OFFICE_LOCATION: str = os.getenv("DEFAULT_OFFICE_LOCATION", "")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
