from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for role management and profile bootstrap

    # Storage: "supabase" uses Supabase Storage buckets, "s3" stores originals in S3
    storage_backend: str = "supabase"
    gallery_bucket: str = "gallery"
    thumbs_bucket: str = "gallery-thumbs"
    avatars_bucket: str = "avatars"
    blog_images_bucket: str = "blog-images"

    # AWS S3 (will read from uppercase env vars automatically)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Limits
    max_event_thumbnails: int = 4
    max_car_photos: int = 5
    signed_url_ttl_seconds: int = 60
    thumbnail_size: int = 400
    community_page_size: int = 50

    # App
    app_name: str = "autodebate-api"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173,http://localhost:8080"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_s3(self) -> bool:
        return self.storage_backend == "s3"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
