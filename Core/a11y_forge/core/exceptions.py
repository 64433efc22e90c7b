class ForgeError(RuntimeError):
    """Base error for source localization and patching."""


class UnsupportedSourceError(ForgeError):
    """Raised when no extractor or patch strategy handles a file type."""


class HealingError(ForgeError):
    """Raised when the code-repair oracle cannot produce a repaired file."""


class RepairResponseError(HealingError):
    """Raised when the code-repair oracle returns an unusable reply."""
