class MetaIndexError(Exception):
    """
    Base exception for every fatal index failure.

    Raising one of these aborts processing before anything is written.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class IndexFileNotFoundError(MetaIndexError):
    """
    Raised when the input index file does not exist.
    """

    pass


class InvalidIndexJSONError(MetaIndexError):
    """
    Raised when the index content is not valid UTF-8 JSON.
    """

    def __init__(self, message: str, *, path: str | None = None, detail: str | None = None) -> None:
        super().__init__(message, path=path)
        self.detail = detail


class InvalidIndexShapeError(MetaIndexError):
    """
    Raised when the top-level JSON value is not an array.
    """

    def __init__(self, message: str, *, path: str | None = None, found: str | None = None) -> None:
        super().__init__(message, path=path)
        self.found = found


class IndexIOError(MetaIndexError):
    """
    Raised when reading the index or writing the backup/output fails.
    """

    pass
