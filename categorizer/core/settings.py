"""Configuration and environment settings for the Firefly AI Categorizer."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the Firefly AI Categorizer.

    Built once at startup and handed to every component; instances are frozen.
    """

    provider: Literal["groq", "ollama"] = "groq"
    language: Literal["EN", "FR"] = "FR"

    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"
    groq_temperature: float = 0.2
    groq_top_p: float = 0.95
    groq_max_output_tokens: int = 256
    groq_stream: bool = False

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    ollama_timeout: float = 60.0

    firefly_url: str = "http://localhost:8080"
    firefly_personal_token: str = ""
    firefly_tag: str = "AI categorized"
    firefly_tag_filter: str = ""

    auto_destination_account: bool = False
    create_destination_accounts: bool = False
    auto_budget: bool = False

    tag_poll_interval: float = 0
    tag_poll_max_transactions: int = 20
    job_timeout: float = 30.0
    webhook_url: str | None = None

    database_url: str = "sqlite:///jobs.db"
    log_file: str | None = None
    debug: bool = False
    server_host: str = "127.0.0.1"
    server_port: int = 3000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
