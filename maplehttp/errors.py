class MapleHttpError(Exception):
    """Base error for maplehttp."""


class StreamError(MapleHttpError, OSError):
    """Raised when a stream cannot be opened, read, written or seeked."""


class RequestError(MapleHttpError):
    """Raised when a message is missing a required part."""


class ResponseError(MapleHttpError):
    """Raised when a response cannot be constructed."""


class InvalidArgumentError(MapleHttpError, ValueError):
    """Raised when an argument fails validation."""


class UploadError(MapleHttpError):
    """Raised when an uploaded file cannot be accessed or moved."""
