"""Application configuration with environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Artefact API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"  # development / production
    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str = "sqlite:///./artefact.db"
    DATABASE_ECHO: bool = False

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Sessions
    SESSION_COOKIE_NAME: str = "session"
    SESSION_TTL_DAYS: int = 7

    # Signup / verification
    VERIFICATION_CODE_TTL_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12
    MIN_PASSWORD_LENGTH: int = 8
    SIGNUP_EMAIL_FAILURE_POLICY: str = "fail"  # fail / warn

    # Mail transport
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "noreply@artefact.app"
    MAIL_FROM_NAME: str = "Artefact"
    MAIL_SERVER: str = "localhost"
    MAIL_PORT: int = 587
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    MAIL_VALIDATE_CERTS: bool = True
    MAIL_TIMEOUT: int = 60
    MAIL_SUPPRESS_SEND: bool = False

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def session_max_age(self) -> int:
        """Session cookie lifetime in seconds."""
        return self.SESSION_TTL_DAYS * 24 * 60 * 60

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()
