import base64

import pytest

from src.errors import ImageReadError
from src.vision.encoding import encode_image, is_valid_image_reference, mime_type_for


@pytest.mark.parametrize(
    "name, expected",
    [
        ("scan.jpg", "image/jpeg"),
        ("scan.jpeg", "image/jpeg"),
        ("scan.JPG", "image/jpeg"),
        ("scan.png", "image/png"),
        ("scan.webp", "image/webp"),
        ("scan.gif", "image/gif"),
        ("scan.bmp", "image/jpeg"),
        ("scan", "image/jpeg"),
    ],
)
def test_mime_type_for_extension(name, expected):
    assert mime_type_for(name) == expected


def test_encode_image_returns_data_url(tmp_path):
    image = tmp_path / "page.png"
    image.write_bytes(b"\x89PNG-bytes")

    result = encode_image(image)

    assert result.startswith("data:image/png;base64,")
    payload = result.split(",", 1)[1]
    assert base64.b64decode(payload) == b"\x89PNG-bytes"


def test_encode_image_unknown_extension_defaults_to_jpeg(tmp_path):
    image = tmp_path / "page.tiff"
    image.write_bytes(b"data")

    assert encode_image(image).startswith("data:image/jpeg;base64,")


def test_encode_image_missing_file_names_absolute_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ImageReadError) as info:
        encode_image("missing.jpg")

    assert str((tmp_path / "missing.jpg").resolve()) in str(info.value)


def test_encode_image_directory_is_not_an_image(tmp_path):
    with pytest.raises(ImageReadError):
        encode_image(tmp_path)


def test_encode_image_unreadable_file(tmp_path, monkeypatch):
    image = tmp_path / "locked.jpg"
    image.write_bytes(b"data")

    def deny(self):
        raise PermissionError("denied")

    monkeypatch.setattr("pathlib.Path.read_bytes", deny)

    with pytest.raises(ImageReadError, match="locked.jpg"):
        encode_image(image)


@pytest.mark.parametrize(
    "value",
    [
        "https://x/y.jpg",
        "http://example.com/image.jpg",
        "https://api.example.com/v1/images/123.jpeg",
        "data:image/png;base64,AAAA",
    ],
)
def test_valid_image_references(value):
    assert is_valid_image_reference(value) is True


@pytest.mark.parametrize(
    "value",
    ["ftp://x", "file:///local/image.jpg", "not-a-url", "", None, 42, "data:text/plain;base64,AA"],
)
def test_invalid_image_references(value):
    assert is_valid_image_reference(value) is False
