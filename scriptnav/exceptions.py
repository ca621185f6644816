"""Custom exceptions for scriptnav.

None of these escape the indexing, caching or resolution layers: they are
raised at the point of failure and caught one frame up, where the failure is
logged and turned into a miss.
"""


class ScriptNavError(Exception):
    """Base class for scriptnav errors."""


class ManifestParseError(ScriptNavError):
    """Raised when manifest text is not a valid JSON/JSONC object.

    Attributes:
        message: Human-readable error description
        offset: Character offset in the source text where parsing stopped
    """

    def __init__(self, message: str, offset: int = 0):
        super().__init__(f"{message} at offset {offset}")
        self.message = message
        self.offset = offset
