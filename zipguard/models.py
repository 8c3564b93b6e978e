"""Data models used throughout the validation pipeline."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import MissingHtml, MultipleHtml

HTML_EXTENSIONS = {"html", "htm"}
CSS_EXTENSIONS = {"css"}
IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}

PASS = "pass"
VIOLATION = "violation"
WARNING = "warning"


def classify_path(path: str) -> str:
    """Return the entry kind (html, css, image, other) for an archive path."""
    extension = posixpath.splitext(path)[1].lower().lstrip(".")
    if extension in HTML_EXTENSIONS:
        return "html"
    if extension in CSS_EXTENSIONS:
        return "css"
    if extension in IMAGE_EXTENSIONS:
        return "image"
    return "other"


@dataclass(frozen=True)
class ArchiveEntry:
    """A single file (or directory marker) read from the archive."""

    path: str
    content: bytes = b""
    is_directory: bool = False

    @property
    def kind(self) -> str:
        if self.is_directory:
            return "other"
        return classify_path(self.path)

    @property
    def name(self) -> str:
        return posixpath.basename(self.path.rstrip("/"))

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.name)[1].lower().lstrip(".")

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.path)

    @property
    def size(self) -> int:
        return len(self.content)

    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class Archive:
    """Ordered, immutable snapshot of archive entries."""

    entries: Tuple[ArchiveEntry, ...] = ()

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def files(self) -> List[ArchiveEntry]:
        return [entry for entry in self.entries if not entry.is_directory]

    def of_kind(self, kind: str) -> List[ArchiveEntry]:
        return [entry for entry in self.files() if entry.kind == kind]

    def html_entries(self) -> List[ArchiveEntry]:
        return self.of_kind("html")

    def css_entries(self) -> List[ArchiveEntry]:
        return self.of_kind("css")

    def images(self) -> List[ArchiveEntry]:
        return self.of_kind("image")

    def html_entry(self) -> ArchiveEntry:
        """Return the sole HTML entry, enforcing the single-HTML invariant."""
        html = self.html_entries()
        if not html:
            raise MissingHtml()
        if len(html) > 1:
            raise MultipleHtml(entry.path for entry in html)
        return html[0]

    def get(self, path: str) -> Optional[ArchiveEntry]:
        for entry in self.files():
            if entry.path == path:
                return entry
        return None

    def replace_entry(self, path: str, content: bytes) -> "Archive":
        entries = tuple(
            replace(entry, content=content) if entry.path == path and not entry.is_directory else entry
            for entry in self.entries
        )
        return Archive(entries)

    def replace_entries(self, contents: Dict[str, bytes]) -> "Archive":
        entries = tuple(
            replace(entry, content=contents[entry.path])
            if entry.path in contents and not entry.is_directory
            else entry
            for entry in self.entries
        )
        return Archive(entries)

    def without(self, paths: Iterable[str]) -> "Archive":
        dropped = set(paths)
        return Archive(tuple(entry for entry in self.entries if entry.path not in dropped))


@dataclass(frozen=True)
class Diagnostic:
    """A human-readable finding, optionally pinned to an entry and line."""

    message: str
    path: Optional[str] = None
    line: Optional[int] = None
    severity: str = VIOLATION

    def __str__(self) -> str:
        text = self.message
        if self.path:
            text += f" in {self.path}"
        if self.line is not None:
            text += f" (line {self.line})"
        return text

    @property
    def is_pass(self) -> bool:
        return self.severity == PASS


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check; always carries at least one diagnostic."""

    name: str
    success: bool
    diagnostics: Tuple[Diagnostic, ...]
    details: Tuple[str, ...] = ()
    suggested_fix: Optional[str] = None
    advisory: bool = False

    @classmethod
    def from_findings(
        cls,
        name: str,
        findings: Iterable[Diagnostic],
        pass_message: str,
        details: Iterable[str] = (),
        suggested_fix: Optional[str] = None,
    ) -> "CheckResult":
        found = tuple(findings)
        if found:
            return cls(
                name=name,
                success=False,
                diagnostics=found,
                details=tuple(details),
                suggested_fix=suggested_fix,
            )
        return cls(
            name=name,
            success=True,
            diagnostics=(Diagnostic(pass_message, severity=PASS),),
            details=tuple(details),
        )

    @property
    def violations(self) -> List[Diagnostic]:
        return [diag for diag in self.diagnostics if not diag.is_pass]

    @property
    def messages(self) -> List[str]:
        return [str(diag) for diag in self.diagnostics]


@dataclass(frozen=True)
class ValidationReport:
    """Ordered check results for one pipeline run."""

    results: Tuple[CheckResult, ...] = ()
    fixed_paths: Tuple[str, ...] = ()

    @property
    def overall_success(self) -> bool:
        return all(result.success for result in self.results if not result.advisory)

    @property
    def violations(self) -> List[Diagnostic]:
        found: List[Diagnostic] = []
        for result in self.results:
            found.extend(result.violations)
        return found

    def get(self, name: str) -> Optional[CheckResult]:
        for result in self.results:
            if result.name == name:
                return result
        return None


@dataclass(frozen=True)
class ImageMetadata:
    """Decoded header information for an image."""

    width: int
    height: int
    format: Optional[str]
    channels: int
    depth: int
    density: Optional[int] = None


@dataclass(frozen=True)
class ResizeInfo:
    """Before/after record for one image touched by the resize engine."""

    path: str
    resized: bool
    original: ImageMetadata
    original_size: int
    new: ImageMetadata
    new_size: int


@dataclass
class ResizeOutcome:
    """Archive produced by the resize engine plus per-image diagnostics."""

    archive: Archive
    size: int
    attempts: int
    quality: int
    width_factor: float
    images: Dict[str, ResizeInfo] = field(default_factory=dict)
