from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Token signing
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 5 * 24 * 60  # 5 days

    # Password hashing work factor
    bcrypt_rounds: int = 12

    # Firebase / Firestore
    firebase_credentials: str = "./firebase.json"

    # S3 image storage
    s3_bucket_name: Optional[str] = None
    aws_region: str = "us-east-2"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    max_image_size_mb: int = 5

    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
