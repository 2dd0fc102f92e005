import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self, **overrides):
        self.APP_NAME: str = os.getenv("APP_NAME", "Dropstore API")
        self.PORT: int = int(os.getenv("PORT", "8000"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

        self.DATABASE_URL = os.getenv("DATABASE_URL")
        self.DATABASE_NAME: str = os.getenv("DATABASE_NAME", "dropstore")

        # Session tokens
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change")
        self.JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

        # Mail
        self.EMAIL = os.getenv("EMAIL")
        self.PASSWORD = os.getenv("PASSWORD")
        self.SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
        self.SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
        self.MAIL_FROM: str = os.getenv("MAIL_FROM", "drop-store.me")
        self.MAIL_WORKERS: int = int(os.getenv("MAIL_WORKERS", "2"))

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting {key}")
            setattr(self, key, value)
