from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOCKBOOK_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    database_url: str = "sqlite:///./stockbook.db"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # JWT
    secret_key: str = "stockbook_secret_key_change_me_in_prod"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12  # 12 horas
    reset_token_expire_minutes: int = 10

    # Correo (recuperación de contraseña)
    frontend_url: str = "http://localhost:3000"
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    mail_from: str = "no-reply@stockbook.example.com"

    # Seed
    admin_name: str = "Administrator"
    admin_email: str = "admin@stockbook.example.com"
    admin_password: str = "admin123"

    @property
    def database_url_normalized(self) -> str:
        url = self.database_url.strip()
        if url.startswith("postgres://"):
            return "postgresql://" + url[len("postgres://"):]
        return url


settings = Settings()
