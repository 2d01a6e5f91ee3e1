"""AnalysisClient — land-title extraction over an OpenAI-compatible vision endpoint."""
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from openai import AsyncOpenAI

from src.config import Config
from src.constants import (
    FOLLOW_UP_PROMPT,
    HEALTH_STATUS_OK,
    MSG_ANALYSIS_DONE,
    MSG_ANALYSIS_ERROR,
    MSG_ANALYSIS_FAILED,
    MSG_ANALYSIS_START,
    MSG_ATTEMPT,
    MSG_ATTEMPT_FAILED,
    MSG_CLIENT_READY,
    MSG_NOT_RETRYABLE,
    SYSTEM_PROMPT,
)
from src.errors import AnalysisFailure
from src.response_store import ResponseStore
from src.vision.encoding import encode_image, is_valid_image_reference
from src.vision.messages import Message, build_messages
from src.vision.result import AnalysisResult, normalize_response, utc_timestamp

logger = logging.getLogger(__name__)

RetryPredicate = Callable[[BaseException], bool]


def retry_everything(_: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class HealthSnapshot:
    status: str
    timestamp: str
    model: str
    base_url: str
    has_api_key: bool
    environment: Optional[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "config": {
                "model": self.model,
                "baseURL": self.base_url,
                "hasApiKey": self.has_api_key,
                "environment": self.environment,
            },
        }


class AnalysisClient:
    """Builds the request, calls the model with linear-backoff retries and shapes the reply.

    The client keeps no per-call state, so one instance can serve concurrent
    ``analyze`` calls.
    """

    def __init__(
        self,
        config: Config,
        *,
        is_retryable: RetryPredicate = retry_everything,
        store: Optional[ResponseStore] = None,
    ) -> None:
        self._config = config.validate()
        self._is_retryable = is_retryable
        self._store = store or ResponseStore(config.response_dir)
        self._openai = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.request_timeout_ms / 1000,
            max_retries=0,
        )
        self.system_prompt = SYSTEM_PROMPT
        self.follow_up_prompt = FOLLOW_UP_PROMPT
        logger.debug(MSG_CLIENT_READY, config.model)

    @property
    def config(self) -> Config:
        return self._config

    async def aclose(self) -> None:
        """Release the HTTP connection pool."""
        await self._openai.close()

    async def __aenter__(self) -> "AnalysisClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    # ── request construction ──────────────────────────────────────────────────

    encode_image = staticmethod(encode_image)
    is_valid_image_reference = staticmethod(is_valid_image_reference)

    def build_messages(
        self,
        image_reference: str,
        *,
        custom_prompt: Optional[str] = None,
        conversation_history: Optional[Sequence[Message]] = None,
        include_follow_up: bool = True,
    ) -> list[Message]:
        return build_messages(
            image_reference,
            custom_prompt=custom_prompt,
            conversation_history=conversation_history,
            include_follow_up=include_follow_up,
            system_prompt=self.system_prompt,
            follow_up_prompt=self.follow_up_prompt,
        )

    # ── remote call ───────────────────────────────────────────────────────────

    async def invoke_model(self, messages: list[Message]) -> Any:
        """Call the model, retrying failures with a delay of ``retry_delay_ms * attempt``.

        The last failure is re-raised unchanged.
        """
        max_retries = self._config.max_retries
        for attempt in range(1, max_retries + 1):
            logger.debug(MSG_ATTEMPT, attempt, max_retries)
            try:
                return await self._openai.chat.completions.create(
                    model=self._config.model,
                    messages=messages,
                    max_tokens=self._config.max_tokens,
                    temperature=self._config.temperature,
                )
            except Exception as exc:
                logger.warning(MSG_ATTEMPT_FAILED, attempt, exc)
                if attempt >= max_retries:
                    raise
                match self._is_retryable(exc):
                    case False:
                        logger.debug(MSG_NOT_RETRYABLE)
                        raise
                    case _:
                        await asyncio.sleep(self._config.retry_delay_ms * attempt / 1000)

    normalize_response = staticmethod(normalize_response)

    def persist_result(self, result: AnalysisResult) -> Optional[Path]:
        """Write ``result`` to the response directory. Failures are logged, never raised."""
        return self._store.save(result)

    # ── public entry points ───────────────────────────────────────────────────

    async def analyze(
        self,
        image_reference: str,
        *,
        custom_prompt: Optional[str] = None,
        conversation_history: Optional[Sequence[Message]] = None,
        include_follow_up: bool = True,
    ) -> AnalysisResult:
        try:
            logger.info(MSG_ANALYSIS_START)
            messages = self.build_messages(
                image_reference,
                custom_prompt=custom_prompt,
                conversation_history=conversation_history,
                include_follow_up=include_follow_up,
            )
            completion = await self.invoke_model(messages)
            result = normalize_response(completion)
        except Exception as exc:
            logger.error(MSG_ANALYSIS_ERROR, exc)
            raise AnalysisFailure(MSG_ANALYSIS_FAILED % exc) from exc

        match self._config.save_responses:
            case True:
                self.persist_result(result)
            case False:
                pass

        logger.info(MSG_ANALYSIS_DONE)
        return result

    async def analyze_file(self, path: str | Path, **options: Any) -> AnalysisResult:
        """Encode a local image and analyze it. Read errors surface as ImageReadError."""
        return await self.analyze(encode_image(path), **options)

    def health_status(self) -> HealthSnapshot:
        return HealthSnapshot(
            status=HEALTH_STATUS_OK,
            timestamp=utc_timestamp(),
            model=self._config.model,
            base_url=self._config.base_url,
            has_api_key=bool(self._config.api_key),
            environment=self._config.environment,
        )
