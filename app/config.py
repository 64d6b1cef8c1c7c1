"""
Configuration settings for the Student Information System backend
"""
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PLACEHOLDER_GEMINI_API_KEY = "your_gemini_api_key_here"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    mongodb_db_name: str = Field(default="sis_db")

    # JWT Configuration
    jwt_secret_key: str = Field(default="your_jwt_secret_key_change_in_production")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7)  # 7 days

    # Aadhaar Encryption
    aadhaar_encryption_key: str = Field(default="your-32-character-secret-key-here!!")

    # Gemini API Configuration
    gemini_api_key: str = Field(default="")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )
    gemini_model: str = Field(default="gemini-2.0-flash")
    chat_timeout_seconds: float = Field(default=30.0)

    # Application Configuration
    app_name: str = Field(default="Student Information System API")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # API Configuration
    api_prefix: str = Field(default="/api")
    frontend_url: str = Field(default="")
    cors_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000"
    )

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list, including the frontend URL when set"""
        origins = [origin.strip() for origin in self.cors_origins.split(',') if origin.strip()]
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def chat_enabled(self) -> bool:
        return bool(self.gemini_api_key) and self.gemini_api_key != PLACEHOLDER_GEMINI_API_KEY

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create global settings instance
settings = Settings()
