import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config import Config
from src.errors import ConversionError
from src.pipeline.pdf import compress_image, merge_vertical, rasterize_pdf, render_pdf


def make_config(tmp_path: Path, **overrides) -> Config:
    values = dict(
        api_key="k",
        base_url="https://api.example.com",
        model="m",
        process_dir=str(tmp_path / "process"),
        output_dir=str(tmp_path / "output"),
    )
    values.update(overrides)
    return Config(**values)


def make_process(returncode=0, stderr=b""):
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    process.wait = AsyncMock(return_value=returncode)
    return process


@pytest.fixture
def pdf(tmp_path):
    path = tmp_path / "DEMO1.pdf"
    path.write_bytes(b"%PDF-1.4")
    return path


@pytest.fixture
def fake_tools(monkeypatch):
    """Stands in for pdftoppm/convert: records argv and creates the files they would write."""
    calls = []

    async def fake_exec(*args, **kwargs):
        calls.append(list(args))
        match args[0]:
            case "pdftoppm":
                prefix = Path(args[-1])
                for n in (1, 2, 10):
                    prefix.with_name(f"{prefix.name}-{n:02d}.jpg").write_bytes(b"jpg")
            case _:
                Path(args[-1]).write_bytes(b"jpg")
        return make_process()

    monkeypatch.setattr("src.pipeline.pdf.asyncio.create_subprocess_exec", fake_exec)
    return calls


async def test_rasterize_runs_pdftoppm_and_sorts_pages(tmp_path, pdf, fake_tools):
    pages = await rasterize_pdf(pdf, tmp_path / "work", config=make_config(tmp_path))

    assert fake_tools[0] == ["pdftoppm", "-jpeg", str(pdf), str(tmp_path / "work" / "page")]
    assert [p.name for p in pages] == ["page-01.jpg", "page-02.jpg", "page-10.jpg"]


async def test_rasterize_removes_stale_pages(tmp_path, pdf, fake_tools):
    work = tmp_path / "work"
    work.mkdir()
    (work / "page-99.jpg").write_bytes(b"old")

    pages = await rasterize_pdf(pdf, work, config=make_config(tmp_path))

    assert "page-99.jpg" not in [p.name for p in pages]


async def test_rasterize_missing_pdf(tmp_path, fake_tools):
    with pytest.raises(ConversionError, match="PDF file not found"):
        await rasterize_pdf(tmp_path / "nope.pdf", tmp_path / "work", config=make_config(tmp_path))

    assert fake_tools == []


async def test_rasterize_no_pages_produced(tmp_path, pdf, monkeypatch):
    monkeypatch.setattr(
        "src.pipeline.pdf.asyncio.create_subprocess_exec",
        AsyncMock(return_value=make_process()),
    )

    with pytest.raises(ConversionError, match="no pages"):
        await rasterize_pdf(pdf, tmp_path / "work", config=make_config(tmp_path))


async def test_tool_failure_includes_stderr(tmp_path, pdf, monkeypatch):
    monkeypatch.setattr(
        "src.pipeline.pdf.asyncio.create_subprocess_exec",
        AsyncMock(return_value=make_process(returncode=1, stderr=b"Syntax Error: broken xref")),
    )

    with pytest.raises(ConversionError, match="broken xref"):
        await rasterize_pdf(pdf, tmp_path / "work", config=make_config(tmp_path))


async def test_missing_binary(tmp_path, pdf, monkeypatch):
    monkeypatch.setattr(
        "src.pipeline.pdf.asyncio.create_subprocess_exec",
        AsyncMock(side_effect=FileNotFoundError("pdftoppm")),
    )

    with pytest.raises(ConversionError, match="External tool not found: pdftoppm"):
        await rasterize_pdf(pdf, tmp_path / "work", config=make_config(tmp_path))


async def test_tool_timeout_kills_process(tmp_path, pdf, monkeypatch):
    process = make_process()
    process.communicate = AsyncMock(side_effect=asyncio.TimeoutError)
    monkeypatch.setattr(
        "src.pipeline.pdf.asyncio.create_subprocess_exec",
        AsyncMock(return_value=process),
    )

    with pytest.raises(ConversionError, match="timed out"):
        await rasterize_pdf(pdf, tmp_path / "work", config=make_config(tmp_path, convert_timeout=5))

    process.kill.assert_called_once()


async def test_merge_vertical_appends_pages(tmp_path, fake_tools):
    pages = [tmp_path / "page-1.jpg", tmp_path / "page-2.jpg"]

    out = await merge_vertical(pages, tmp_path / "out" / "merged.jpg", config=make_config(tmp_path))

    assert out == tmp_path / "out" / "merged.jpg"
    assert fake_tools[0] == ["convert", "-append", *map(str, pages), str(out)]


async def test_merge_vertical_requires_pages(tmp_path, fake_tools):
    with pytest.raises(ConversionError):
        await merge_vertical([], tmp_path / "merged.jpg", config=make_config(tmp_path))


async def test_compress_uses_configured_quality(tmp_path, fake_tools):
    config = make_config(tmp_path, imagemagick_path="magick", jpeg_quality=60)

    await compress_image(tmp_path / "merged.jpg", tmp_path / "small.jpg", config=config)
    await compress_image(tmp_path / "merged.jpg", tmp_path / "smaller.jpg", config=config, quality=40)

    assert fake_tools[0] == ["magick", str(tmp_path / "merged.jpg"), "-quality", "60", str(tmp_path / "small.jpg")]
    assert fake_tools[1][3] == "40"


async def test_render_pdf_full_pipeline(tmp_path, pdf, fake_tools):
    config = make_config(tmp_path)

    merged = await render_pdf(pdf, config=config)
    compressed = await render_pdf(pdf, config=config, compress=True)

    assert merged == tmp_path / "output" / "merged.jpg"
    assert compressed == tmp_path / "output" / "compressed.jpg"
    assert [c[0] for c in fake_tools] == ["pdftoppm", "convert", "pdftoppm", "convert", "convert"]
