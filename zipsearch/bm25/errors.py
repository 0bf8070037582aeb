"""
Error kinds raised by the index build, codec and load paths.

None of these are retried: they propagate to the caller (CLI or request
handler), which decides how to report them. File open/read/write failures
are left as the builtin OSError.
"""


class SearchIndexError(Exception):
    """Base class for all index errors"""


class InputParseError(SearchIndexError):
    """A build input record could not be parsed. Fatal to the whole build."""

    def __init__(self, line_no: int, reason: str):
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"Malformed record on line {line_no}: {reason}")


class CodecError(SearchIndexError):
    """Persisted index blob is unreadable or written by an incompatible schema"""


class EmptyCollectionError(SearchIndexError, ZeroDivisionError):
    """Average document length requested over zero documents"""

    def __init__(self):
        super().__init__("Cannot build an index from an empty record stream (average document length is undefined)")
