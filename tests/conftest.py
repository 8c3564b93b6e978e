from __future__ import annotations

import io
import os
import zipfile
from typing import Dict, Iterable, Tuple, Union

import pytest
from PIL import Image

from zipguard.fetch import StylesheetFetchError
from zipguard.models import Archive, ArchiveEntry

Content = Union[str, bytes]

CLEAN_HTML = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Newsletter</title>
</head>
<body>
<table width="600" cellpadding="0" cellspacing="0">
<tr>
<td style="background-color: #ffffff; padding: 10px">
<img src="images/logo.png" width="100" height="50" alt="Logo">
</td>
</tr>
<tr>
<td style="padding: 10px">
<a href="https://example.com/offer">Read the offer</a>
</td>
</tr>
</table>
</body>
</html>
"""


def _as_bytes(content: Content) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content


def make_zip(files: Dict[str, Content], directories: Iterable[str] = ()) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as container:
        for directory in directories:
            container.writestr(directory.rstrip("/") + "/", b"")
        for path, content in files.items():
            container.writestr(path, _as_bytes(content))
    return buffer.getvalue()


def make_image(
    fmt: str = "PNG",
    size: Tuple[int, int] = (100, 50),
    dpi: Union[Tuple[int, int], None] = (72, 72),
    color: Tuple[int, int, int] = (200, 30, 30),
) -> bytes:
    image = Image.new("RGB", size, color)
    buffer = io.BytesIO()
    params = {"dpi": dpi} if dpi else {}
    image.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def make_noise_jpeg(size: Tuple[int, int], quality: int = 95) -> bytes:
    """Random pixels compress badly, so the encoded size grows with the area."""
    width, height = size
    image = Image.frombytes("RGB", size, os.urandom(width * height * 3))
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, dpi=(72, 72))
    return buffer.getvalue()


def build_archive(files: Dict[str, Content]) -> Archive:
    return Archive(tuple(ArchiveEntry(path=path, content=_as_bytes(content)) for path, content in files.items()))


class FakeFetcher:
    def __init__(self, responses: Dict[str, str]) -> None:
        self.responses = responses
        self.calls = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.responses:
            raise StylesheetFetchError("404 Client Error")
        return self.responses[url]


class FakeNotifier:
    def __init__(self) -> None:
        self.sent = []

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        self.sent.append((recipient, subject, html_body))


class FakeStore:
    def __init__(self) -> None:
        self.uploads = []

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        self.uploads.append((path, content, content_type))
        return f"https://storage.example.com/{path}"


@pytest.fixture
def clean_html() -> str:
    return CLEAN_HTML


@pytest.fixture
def logo_png() -> bytes:
    return make_image("PNG", (100, 50))


@pytest.fixture
def clean_files(clean_html, logo_png) -> Dict[str, Content]:
    return {"index.html": clean_html, "images/logo.png": logo_png}


@pytest.fixture
def clean_zip(clean_files) -> bytes:
    return make_zip(clean_files, directories=["images"])


@pytest.fixture
def offline_fetcher() -> FakeFetcher:
    return FakeFetcher({})
