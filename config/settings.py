"""Application settings using Pydantic Settings."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import List

DEFAULT_DATABASE_NAME = "exercise-track"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Database Configuration
    mongodb_url: str = Field(
        "mongodb://localhost:27017/exercise-track",
        validation_alias=AliasChoices("mongodb_url", "mlab_uri"),
    )
    users_collection: str = "users"
    
    # Application Configuration
    app_name: str = "Exercise Tracker"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    
    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 3000
    
    # CORS Configuration
    cors_origins: List[str] = ["*"]
    
    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def database_name(self) -> str:
        """Database name taken from the path of the MongoDB URL."""
        hosts_and_path = self.mongodb_url.split("?")[0].split("://", 1)[-1]
        path = hosts_and_path.partition("/")[2].strip("/")
        return path.split("/")[-1] if path else DEFAULT_DATABASE_NAME


# Global settings instance
settings = Settings()
