from pydantic_settings import BaseSettings
from pydantic import SecretStr
import os
from dotenv import load_dotenv
import pytz

load_dotenv()

class Settings(BaseSettings):
    app_name: str = "Examly API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Supabase Configuration
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_service_role_key: SecretStr = SecretStr(os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""))

    # Storage buckets
    papers_bucket: str = os.getenv("PAPERS_BUCKET", "generated-papers")
    keys_bucket: str = os.getenv("KEYS_BUCKET", "key")
    max_stored_papers: int = int(os.getenv("MAX_STORED_PAPERS", 5))

    # Query limits
    question_fetch_limit: int = int(os.getenv("QUESTION_FETCH_LIMIT", 1000))

    timezone: str = os.getenv("TIMEZONE", "Asia/Karachi")

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    def public_object_url(self, bucket: str, path: str) -> str:
        return f"{self.supabase_url}/storage/v1/object/public/{bucket}/{path}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
