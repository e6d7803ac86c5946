"""
Pydantic settings for environment configuration.
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FetchClientSettings(BaseSettings):
    """
    Client defaults from environment variables.

    Reads from:
    1. Environment variables (FETCH_CLIENT_*)
    2. .env file
    3. Defaults

    Example .env file:
        FETCH_CLIENT_BASE_URL=https://api.example.com
        FETCH_CLIENT_TIMEOUT=5000
        FETCH_CLIENT_RETRY=2
        FETCH_CLIENT_RETRY_DELAY=250
        FETCH_CLIENT_RETRY_STATUS_CODES=[429, 503]
        FETCH_CLIENT_HEADERS={"x-api-key": "secret-key-123"}
        FETCH_CLIENT_LOG_ENABLED=true
        FETCH_CLIENT_LOG_FORMAT=json

    Usage:
        >>> settings = FetchClientSettings()
        >>> settings.base_url
        'https://api.example.com'
    """

    model_config = SettingsConfigDict(
        env_prefix='FETCH_CLIENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Request defaults
    base_url: str = Field(default="", description="Base URL for relative targets")
    timeout: Optional[float] = Field(default=None, gt=0, description="Per-attempt timeout in ms")
    retry: Optional[int] = Field(default=None, ge=0, le=10, description="Retries; unset = by method")
    retry_delay: float = Field(default=0, ge=0, description="Delay between attempts in ms")
    retry_status_codes: Optional[List[int]] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    response_type: Optional[Literal["json", "text", "blob", "arrayBuffer", "stream"]] = None
    ignore_response_error: bool = False

    # Logging
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)
    log_headers: bool = Field(default=False)

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('retry_status_codes')
    @classmethod
    def validate_status_codes(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is not None:
            invalid = [code for code in v if not 100 <= code <= 599]
            if invalid:
                raise ValueError(f"Invalid HTTP status codes: {invalid}")
        return v

    @model_validator(mode='after')
    def validate_log_file(self) -> "FetchClientSettings":
        """file_path is required when file logging is on."""
        if self.log_enabled and self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self
