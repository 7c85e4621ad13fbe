import os
from pydantic_settings import BaseSettings


def get_default_database_url() -> str:
    """Get default database URL based on environment."""
    if os.environ.get("DATABASE_URL"):
        return os.environ.get("DATABASE_URL")
    # Serverless filesystems are read-only outside /tmp
    if os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
        return "sqlite:////tmp/preppal.db"
    return "sqlite:///./preppal.db"


class Settings(BaseSettings):
    APP_NAME: str = "PrepPal API"
    DATABASE_URL: str = get_default_database_url()
    LOG_LEVEL: str = "INFO"
    HTTP_TIMEOUT_S: float = 15.0

    # USDA FoodData Central
    USDA_API_KEY: str = "DEMO_KEY"
    USDA_BASE_URL: str = "https://api.nal.usda.gov/fdc/v1"

    # FatSecret platform (OAuth2 client credentials)
    FATSECRET_CLIENT_ID: str = ""
    FATSECRET_CLIENT_SECRET: str = ""
    FATSECRET_API_URL: str = "https://platform.fatsecret.com/rest/server.api"
    FATSECRET_TOKEN_URL: str = "https://oauth.fatsecret.com/connect/token"

    # Open Food Facts
    OFF_BASE_URL: str = "https://world.openfoodfacts.org"
    OFF_USER_AGENT: str = "PrepPal/1.0 (contact@preppal.app)"

    # Kroger
    KROGER_CLIENT_ID: str = ""
    KROGER_CLIENT_SECRET: str = ""
    KROGER_REDIRECT_URI: str = ""
    KROGER_API_URL: str = "https://api.kroger.com/v1"
    KROGER_AUTH_URL: str = "https://api.kroger.com/v1/connect/oauth2"

    # Instruction generator
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-5"

    # Identity provider JWTs
    AUTH_JWT_SECRET: str = ""
    AUTH_JWT_AUDIENCE: str = "authenticated"
    AUTH_JWT_ALGORITHM: str = "HS256"

    class Config:
        env_file = ".env"


settings = Settings()
