# featureboard/core/config.py

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self):
        self.env = os.getenv("ENV", "dev")
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./featureboard.db")

        self.jwt_secret = os.getenv("JWT_SECRET")
        self.jwt_algorithm = "HS256"
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))
        self.email_token_expires_hours = int(os.getenv("EMAIL_TOKEN_EXPIRES_HOURS", 24))

        self.app_url = os.getenv("APP_URL", "http://localhost:3000").rstrip("/")
        self.notification_email = os.getenv("NOTIFICATION_EMAIL")

        # Microsoft Graph mail
        self.ms_client_id = os.getenv("MS_CLIENT_ID")
        self.ms_client_secret = os.getenv("MS_CLIENT_SECRET")
        self.ms_tenant_id = os.getenv("MS_TENANT_ID")
        self.ms_sender_email = os.getenv("MS_SENDER_EMAIL")

        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        self.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

        if not self.jwt_secret:
            raise RuntimeError("JWT_SECRET environment variable is not set!")

    @property
    def email_configured(self) -> bool:
        return all([self.ms_client_id, self.ms_client_secret, self.ms_tenant_id, self.ms_sender_email])


settings = Settings()
