class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class FileDecodeError(ProcessorError):
    """Raised when a submitted file cannot be read as an image."""


class StoreError(ProcessorError):
    """Raised when the record store fails to create, list or delete records."""


class ArchiveError(ProcessorError):
    """Raised when a manuscript archive cannot be written."""
