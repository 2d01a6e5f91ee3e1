"""PDF → page JPEGs → one vertical image, by driving pdftoppm and ImageMagick."""
import asyncio
import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from src.config import Config
from src.constants import (
    COMPRESSED_IMAGE_NAME,
    IMAGEMAGICK_APPEND_FLAG,
    IMAGEMAGICK_QUALITY_FLAG,
    MERGED_IMAGE_NAME,
    MSG_NO_INPUT_PAGES,
    MSG_NO_PAGES,
    MSG_PDF_NOT_FOUND,
    MSG_RENDERED,
    MSG_RUNNING_TOOL,
    MSG_TOOL_FAILED,
    MSG_TOOL_NOT_FOUND,
    MSG_TOOL_TIMEOUT,
    PAGE_GLOB,
    PAGE_PREFIX,
    PDFTOPPM_JPEG_FLAG,
    STDERR_EXCERPT_LEN,
)
from src.errors import ConversionError

logger = logging.getLogger(__name__)

_PAGE_NUMBER = re.compile(r"-(\d+)\.jpg$")


def _page_number(path: Path) -> int:
    match _PAGE_NUMBER.search(path.name):
        case None:
            return 0
        case m:
            return int(m.group(1))


async def _run(args: Sequence[str], timeout: float) -> None:
    tool = args[0]
    logger.debug(MSG_RUNNING_TOOL, " ".join(args))
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise ConversionError(MSG_TOOL_NOT_FOUND % tool) from exc

    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise ConversionError(MSG_TOOL_TIMEOUT % (tool, timeout)) from exc

    match process.returncode:
        case 0:
            pass
        case code:
            err = stderr.decode(errors="replace")[:STDERR_EXCERPT_LEN].strip() if stderr else ""
            raise ConversionError(MSG_TOOL_FAILED % (tool, code, err or "no output"))


async def rasterize_pdf(pdf: str | Path, work_dir: str | Path, *, config: Config) -> list[Path]:
    """Render every page of ``pdf`` to ``work_dir/page-N.jpg``, returned in page order."""
    pdf_path = Path(pdf)
    match pdf_path.is_file():
        case True:
            pass
        case False:
            raise ConversionError(MSG_PDF_NOT_FOUND % pdf_path.resolve())

    out_dir = Path(work_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    # stale pages from an earlier, longer document would otherwise be merged in
    for stale in out_dir.glob(PAGE_GLOB):
        stale.unlink()

    await _run(
        [config.pdftoppm_path, PDFTOPPM_JPEG_FLAG, str(pdf_path), str(out_dir / PAGE_PREFIX)],
        config.convert_timeout,
    )

    pages = sorted(out_dir.glob(PAGE_GLOB), key=_page_number)
    match pages:
        case []:
            raise ConversionError(MSG_NO_PAGES % pdf_path)
        case _:
            return pages


async def merge_vertical(pages: Sequence[Path], output: str | Path, *, config: Config) -> Path:
    match list(pages):
        case []:
            raise ConversionError(MSG_NO_INPUT_PAGES)
        case _:
            pass

    out_path = Path(output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    await _run(
        [config.imagemagick_path, IMAGEMAGICK_APPEND_FLAG, *map(str, pages), str(out_path)],
        config.convert_timeout,
    )
    return out_path


async def compress_image(
    source: str | Path,
    destination: str | Path,
    *,
    config: Config,
    quality: Optional[int] = None,
) -> Path:
    dest = Path(destination)
    dest.parent.mkdir(parents=True, exist_ok=True)
    await _run(
        [
            config.imagemagick_path,
            str(source),
            IMAGEMAGICK_QUALITY_FLAG,
            str(quality or config.jpeg_quality),
            str(dest),
        ],
        config.convert_timeout,
    )
    return dest


async def render_pdf(pdf: str | Path, *, config: Config, compress: bool = False) -> Path:
    """Rasterize, merge and optionally compress ``pdf``; returns the image to analyze."""
    pages = await rasterize_pdf(pdf, config.process_dir, config=config)
    output_dir = Path(config.output_dir)
    merged = await merge_vertical(pages, output_dir / MERGED_IMAGE_NAME, config=config)
    final = (
        await compress_image(merged, output_dir / COMPRESSED_IMAGE_NAME, config=config)
        if compress
        else merged
    )
    logger.info(MSG_RENDERED, pdf, final)
    return final
