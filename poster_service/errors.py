"""Exception taxonomy shared by the loader, parser, renderer and catalog."""


class PosterServiceError(Exception):
    """Base class for every failure raised by this package."""


class LoadError(PosterServiceError):
    """The template image is missing, unreadable or cannot be decoded."""


class ParseError(PosterServiceError):
    """The guest list is unreadable or contains a malformed row."""


class RenderError(PosterServiceError):
    """One guest's poster could not be drawn, encoded or written."""


class ScanError(PosterServiceError):
    """The output directory could not be opened for listing."""
