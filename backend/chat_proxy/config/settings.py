"""
Configuration Settings.
"""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "Claude Chat Proxy"
    app_version: str = "1.0.0"
    debug: bool = False

    # Anthropic Messages API
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_api_key: str = ""
    anthropic_version: str = "2023-06-01"

    # Request defaults (overridable per request for model and temperature)
    llm_model: str = "claude-3-5-sonnet-20241022"
    llm_max_tokens: int = 1024
    llm_temperature: float = 1.0
    llm_timeout_seconds: float = 30.0  # matches the browser client's timeout

    # Sessions
    session_timeout_seconds: int = 3600  # 1 hour
    session_cleanup_interval_seconds: int = 300

    # Static chat page
    static_dir: str = str(Path(__file__).resolve().parent.parent / "static")

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/chat_proxy.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
