# pharmadir/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Pharmacy Directory API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Public URLs used when building email links
    client_url: str = os.getenv("CLIENT_URL", "http://localhost:3000").rstrip("/")
    public_api_url: str = os.getenv("PUBLIC_API_URL", "http://localhost:8000").rstrip("/")

    # Token signing
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")  # use a strong secret in production
    jwt_alg: str = os.getenv("JWT_ALG", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    reset_token_expire_minutes: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "30"))
    verify_token_expire_minutes: int = int(os.getenv("VERIFY_TOKEN_EXPIRE_MINUTES", "1440"))

    # Optimistic concurrency for favorites (compare-and-set attempts per request)
    favorites_max_attempts: int = int(os.getenv("FAVORITES_MAX_ATTEMPTS", "10"))

    # Transactional mail HTTP API; when unset, mails are only logged
    mail_api_url: str | None = os.getenv("MAIL_API_URL")
    mail_api_key: str | None = os.getenv("MAIL_API_KEY")
    mail_from: str = os.getenv("MAIL_FROM", "no-reply@pharmadir.local")

    # Default admin created on first startup (skipped without ADMIN_PASSWORD)
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    admin_password: str | None = os.getenv("ADMIN_PASSWORD")
    admin_name: str = os.getenv("ADMIN_NAME", "Administrator")

settings = Settings()  # Instantiate configuration
