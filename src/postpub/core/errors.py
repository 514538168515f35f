"""Pipeline error kinds, each carrying the offending file path and segment index"""

from typing import Optional


class PostpubError(Exception):
    """Base error for a single document; never aborts processing of other documents."""
    kind = "error"

    def __init__(self, message: str, path: Optional[str] = None, segment: Optional[int] = None):
        self.message = message
        self.path = path
        self.segment = segment
        super().__init__(message)

    def with_location(self, path: str, segment: Optional[int]) -> "PostpubError":
        """Attach path/segment (keeps values already set) and return self for re-raising."""
        self.path = self.path or path
        if self.segment is None:
            self.segment = segment
        return self

    def __str__(self) -> str:
        location = []
        if self.path:
            location.append(self.path)
        if self.segment is not None:
            location.append(f"segment {self.segment}")
        return f"{': '.join(location)}: {self.message}" if location else self.message


class MalformedDocument(PostpubError):
    """A split produced a segment with an empty header."""
    kind = "malformed_document"


class UnrecognizedFrontMatter(PostpubError):
    """Neither the KeyValue nor the HeadingStyle convention matches the header."""
    kind = "unrecognized_front_matter"


class InvalidDate(PostpubError):
    kind = "invalid_date"


class UnterminatedCodeFence(PostpubError):
    """A code fence was opened but never closed; only raised in strict mode."""
    kind = "unterminated_code_fence"
