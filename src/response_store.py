import json
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from src.constants import (
    DEFAULT_RESPONSE_DIR,
    MSG_SAVE_FAILED,
    MSG_SAVING_RESPONSE,
    RESPONSE_FILE_PREFIX,
    RESPONSE_FILE_SUFFIX,
)
from src.vision.result import AnalysisResult

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    return time.time_ns() // 1_000_000


class ResponseStore:
    """Writes each AnalysisResult to ``response_<epoch-ms>.json`` under one directory."""

    def __init__(
        self,
        directory: str | Path = DEFAULT_RESPONSE_DIR,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        self._dir = Path(directory)
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, stamp: int) -> Path:
        return self._dir / f"{RESPONSE_FILE_PREFIX}{stamp}{RESPONSE_FILE_SUFFIX}"

    def save(self, result: AnalysisResult) -> Optional[Path]:
        """Persist ``result``; returns the file path, or None when the write failed."""
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path = self.path_for(self._clock())
            logger.debug(MSG_SAVING_RESPONSE, path)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
            return path
        except Exception as e:
            logger.warning(MSG_SAVE_FAILED, e)
            return None
