from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "palmleaf"
    db_username: str = "palmleaf"
    db_password: str = "secret"

    inference_provider: str = "openai"
    inference_api_key: str = ""
    inference_base_url: str = ""
    inference_timeout_seconds: int = 120

    restoration_model_name: str = "gpt-image-1"
    analysis_model_name: str = "gpt-4o"
    analysis_temperature: float = 0.2

    retry_variation_max: int = 1000
