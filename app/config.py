from pydantic_settings import BaseSettings
from pydantic import SecretStr
from typing import List, Optional
import os
from dotenv import load_dotenv

load_dotenv()

# Domain constants
CLASS_MIN = 6
CLASS_MAX = 10
QUESTION_COUNT_CHOICES = (10, 20)
CSV_OPTION_COUNT = 4
SCOPE_TYPES = ("chapter", "topic")

class Settings(BaseSettings):
    app_name: str = "Class Quiz API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Supabase Configuration
    supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
    supabase_anon_key: SecretStr = SecretStr(os.getenv("SUPABASE_ANON_KEY", ""))
    supabase_service_role_key: SecretStr = SecretStr(os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""))
    storage_bucket: str = os.getenv("STORAGE_BUCKET", "images")

    # Comma separated list of emails that always get the admin role
    admin_emails: str = os.getenv("ADMIN_EMAILS", "")

    # In-memory attempt state
    attempt_state_max_age_hours: int = int(os.getenv("ATTEMPT_STATE_MAX_AGE_HOURS", 2))

    @property
    def admin_email_list(self) -> List[str]:
        return [e.strip().lower() for e in self.admin_emails.split(",") if e.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
