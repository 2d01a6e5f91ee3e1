from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from src.constants import (
    DEFAULT_CONVERT_TIMEOUT,
    DEFAULT_IMAGEMAGICK_PATH,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_TOKENS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PDFTOPPM_PATH,
    DEFAULT_PROCESS_DIR,
    DEFAULT_REQUEST_TIMEOUT_MS,
    DEFAULT_RESPONSE_DIR,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_TEMPERATURE,
    ENV_API_KEY,
    ENV_APP_ENV,
    ENV_BASE_URL,
    ENV_CONVERT_TIMEOUT,
    ENV_IMAGEMAGICK_PATH,
    ENV_JPEG_QUALITY,
    ENV_LOG_LEVEL,
    ENV_MAX_RETRIES,
    ENV_MAX_TOKENS,
    ENV_MODEL,
    ENV_OUTPUT_DIR,
    ENV_PDFTOPPM_PATH,
    ENV_PROCESS_DIR,
    ENV_REQUEST_TIMEOUT_MS,
    ENV_RESPONSE_DIR,
    ENV_RETRY_DELAY_MS,
    ENV_SAVE_RESPONSES,
    ENV_TEMPERATURE,
    LOG_LEVELS,
    MSG_INVALID_LOG_LEVEL,
    MSG_INVALID_MAX_RETRIES,
    MSG_INVALID_NUMBER,
    MSG_INVALID_QUALITY,
    MSG_MISSING_ENV,
    TRUE_VALUES,
)
from src.errors import ConfigurationError


def _number(name: str, default, cast=int):
    raw = os.getenv(name)
    match raw:
        case None | "":
            return default
        case _:
            try:
                return cast(raw.strip())
            except ValueError:
                raise ConfigurationError(MSG_INVALID_NUMBER % (name, raw)) from None


@dataclass(frozen=True)
class Config:
    api_key: Optional[str]
    base_url: Optional[str]
    model: Optional[str]
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    save_responses: bool = False
    response_dir: str = DEFAULT_RESPONSE_DIR
    log_level: str = DEFAULT_LOG_LEVEL
    environment: Optional[str] = None
    pdftoppm_path: str = DEFAULT_PDFTOPPM_PATH
    imagemagick_path: str = DEFAULT_IMAGEMAGICK_PATH
    convert_timeout: int = DEFAULT_CONVERT_TIMEOUT
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    process_dir: str = DEFAULT_PROCESS_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        config = cls(
            api_key=os.getenv(ENV_API_KEY) or None,
            base_url=os.getenv(ENV_BASE_URL) or None,
            model=os.getenv(ENV_MODEL) or None,
            request_timeout_ms=_number(ENV_REQUEST_TIMEOUT_MS, DEFAULT_REQUEST_TIMEOUT_MS),
            max_retries=_number(ENV_MAX_RETRIES, DEFAULT_MAX_RETRIES),
            retry_delay_ms=_number(ENV_RETRY_DELAY_MS, DEFAULT_RETRY_DELAY_MS),
            max_tokens=_number(ENV_MAX_TOKENS, DEFAULT_MAX_TOKENS),
            temperature=_number(ENV_TEMPERATURE, DEFAULT_TEMPERATURE, cast=float),
            save_responses=os.getenv(ENV_SAVE_RESPONSES, "").strip().lower() in TRUE_VALUES,
            response_dir=os.getenv(ENV_RESPONSE_DIR) or DEFAULT_RESPONSE_DIR,
            log_level=(os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).strip().lower(),
            environment=os.getenv(ENV_APP_ENV) or None,
            pdftoppm_path=os.getenv(ENV_PDFTOPPM_PATH) or DEFAULT_PDFTOPPM_PATH,
            imagemagick_path=os.getenv(ENV_IMAGEMAGICK_PATH) or DEFAULT_IMAGEMAGICK_PATH,
            convert_timeout=_number(ENV_CONVERT_TIMEOUT, DEFAULT_CONVERT_TIMEOUT),
            jpeg_quality=_number(ENV_JPEG_QUALITY, DEFAULT_JPEG_QUALITY),
            process_dir=os.getenv(ENV_PROCESS_DIR) or DEFAULT_PROCESS_DIR,
            output_dir=os.getenv(ENV_OUTPUT_DIR) or DEFAULT_OUTPUT_DIR,
        )
        return config.validate()

    def missing_settings(self) -> list[str]:
        """Names of every required setting that is unset or blank."""
        present = {
            ENV_API_KEY: self.api_key,
            ENV_BASE_URL: self.base_url,
            ENV_MODEL: self.model,
        }
        return [name for name, value in present.items() if not (value or "").strip()]

    def validate(self) -> "Config":
        match self.missing_settings():
            case []:
                pass
            case missing:
                raise ConfigurationError(MSG_MISSING_ENV % ", ".join(missing))

        match self.log_level:
            case level if level in LOG_LEVELS:
                pass
            case level:
                raise ConfigurationError(MSG_INVALID_LOG_LEVEL % ("/".join(LOG_LEVELS), level))

        match self.max_retries:
            case n if n < 1:
                raise ConfigurationError(MSG_INVALID_MAX_RETRIES % n)
            case _:
                pass

        match self.jpeg_quality:
            case q if not 1 <= q <= 100:
                raise ConfigurationError(MSG_INVALID_QUALITY % q)
            case _:
                pass

        return self
