from __future__ import annotations

import pytest

from conftest import build_archive
from zipguard.checks.video import check_embedded_videos, is_video_link
from zipguard.config import ValidationConfig


def _run(html):
    return check_embedded_videos(build_archive({"index.html": html}), ValidationConfig())


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.youtube.com/watch?v=abc", True),
        ("https://youtu.be/abc", True),
        ("//player.vimeo.com/video/1", True),
        ("vimeo.com/1", True),
        ("https://example.com/youtube.com", False),
        ("", False),
    ],
)
def test_is_video_link(url, expected) -> None:
    assert is_video_link(url) is expected


def test_plain_link_to_video_host_fails() -> None:
    result = _run('<html><body><a href="https://youtube.com/watch?v=1">Watch</a></body></html>')
    assert not result.success
    assert result.violations[0].message == (
        "Link to video (https://youtube.com/watch?v=1) must be shown using a preview image, not plain link."
    )


def test_link_wrapping_preview_image_passes() -> None:
    html = '<html><body><a href="https://youtube.com/watch?v=1"><img src="thumb.png" alt="Watch"></a></body></html>'
    result = _run(html)
    assert result.success
    assert result.messages == ["No embedded videos found"]


def test_video_tag_always_fails() -> None:
    result = _run('<html><body><table><tr><td><video src="clip.mp4"></video></td></tr></table></body></html>')
    assert [diag.message for diag in result.violations] == [
        "<video> tag detected. Use a static image linking to a video instead."
    ]


def test_iframe_messages_depend_on_source() -> None:
    html = (
        "<html><body>\n"
        '<iframe src="https://www.youtube.com/embed/1"></iframe>\n'
        '<iframe src="https://example.com/widget"></iframe>\n'
        "</body></html>"
    )
    result = _run(html)
    messages = [str(diag) for diag in result.violations]
    assert messages == [
        '<iframe> embed from "https://www.youtube.com/embed/1" is not allowed. '
        "Use a preview image linking to this video. in index.html (line 2)",
        "<iframe> detected. Embedding content is not allowed. in index.html (line 3)",
    ]
