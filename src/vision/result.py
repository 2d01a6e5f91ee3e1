"""AnalysisResult and the normalization of raw chat-completion replies."""
import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from src.constants import JSON_BLOCK_PATTERN, MSG_NO_JSON_BLOCK

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(JSON_BLOCK_PATTERN)


@dataclass(frozen=True)
class ResultMetadata:
    finish_reason: Optional[str] = None
    total_tokens: Optional[int] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "finishReason": self.finish_reason,
            "totalTokens": self.total_tokens,
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
        })


@dataclass(frozen=True)
class AnalysisResult:
    success: bool
    timestamp: str
    model: Optional[str]
    response: str
    usage: Optional[dict[str, Any]]
    metadata: ResultMetadata
    extracted_data: Optional[Any] = None

    def to_dict(self) -> dict[str, Any]:
        """Serializable form; absent values are left out rather than written as null."""
        return _drop_none({
            "success": self.success,
            "timestamp": self.timestamp,
            "model": self.model,
            "usage": self.usage,
            "response": self.response,
            "metadata": self.metadata.to_dict(),
            "extractedData": self.extracted_data,
        })


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _field(obj: Any, name: str) -> Any:
    """Read ``name`` from an SDK object or a plain dict; None when absent."""
    match obj:
        case None:
            return None
        case dict():
            return obj.get(name)
        case _:
            return getattr(obj, name, None)


def _as_dict(obj: Any) -> Optional[dict[str, Any]]:
    match obj:
        case None:
            return None
        case dict():
            return dict(obj)
        case _ if hasattr(obj, "model_dump"):
            return obj.model_dump(exclude_none=True)
        case _ if hasattr(obj, "__dict__"):
            return dict(vars(obj))
        case _:
            return None


def try_parse_json(text: str) -> Optional[Any]:
    """Parse the first ```json fenced block in ``text``; None if there is none or it is malformed."""
    match _JSON_BLOCK.search(text or ""):
        case None:
            logger.debug(MSG_NO_JSON_BLOCK)
            return None
        case found:
            try:
                return json.loads(found.group(1))
            except json.JSONDecodeError:
                logger.debug(MSG_NO_JSON_BLOCK)
                return None


def normalize_response(completion: Any) -> AnalysisResult:
    """Shape a raw completion into an AnalysisResult. Never raises on missing fields."""
    choices = _field(completion, "choices") or []
    first = choices[0] if choices else None
    content = _field(_field(first, "message"), "content")
    text = content if isinstance(content, str) else ""
    usage = _field(completion, "usage")

    return AnalysisResult(
        success=True,
        timestamp=utc_timestamp(),
        model=_field(completion, "model"),
        response=text,
        usage=_as_dict(usage),
        metadata=ResultMetadata(
            finish_reason=_field(first, "finish_reason"),
            total_tokens=_field(usage, "total_tokens"),
            prompt_tokens=_field(usage, "prompt_tokens"),
            completion_tokens=_field(usage, "completion_tokens"),
        ),
        extracted_data=try_parse_json(text),
    )
