"""Exception taxonomy for import and export failures"""


class DraftError(Exception):
    """Base class for every failure raised while importing or exporting a draft."""


class UnsupportedInputError(DraftError):
    """No parser can handle the input (e.g. binary data that is not a PDF)."""


class MalformedSourceError(DraftError):
    """Input matched a format but its content is broken or empty."""


class MissingFieldError(DraftError):
    """A required field could not be resolved or is empty."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Missing required field: {field}")


class ImportCancelledError(DraftError):
    """A human decision prompt was dismissed."""


class RenderError(DraftError):
    """The page template produced no output."""
