"""Fatal errors that abort a validation run before any report is produced."""

from __future__ import annotations


class ArchiveError(Exception):
    """Base class for errors that stop the pipeline."""


class EmptyArchive(ArchiveError):
    def __init__(self) -> None:
        super().__init__("The ZIP file is empty (0 KB).")


class MalformedArchive(ArchiveError):
    """Raised when the bytes cannot be decoded as a ZIP container."""


class MissingHtml(ArchiveError):
    def __init__(self) -> None:
        super().__init__("No HTML file found in the ZIP.")


class MultipleHtml(ArchiveError):
    def __init__(self, paths) -> None:
        self.paths = list(paths)
        super().__init__(
            "More than one HTML file found in the ZIP: " + ", ".join(self.paths)
        )


class BudgetUnattainable(ArchiveError):
    """Raised when the resize search exhausts quality and width reductions."""

    def __init__(self, budget: int, final_size: int, attempts: int) -> None:
        self.budget = budget
        self.final_size = final_size
        self.attempts = attempts
        super().__init__(
            f"Cannot reduce ZIP size below {budget // 1024}KB after {attempts} attempts "
            f"(smallest candidate was {final_size / 1024:.2f}KB)."
        )
