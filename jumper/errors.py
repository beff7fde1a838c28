"""Errors returned to handlers by request accessors and the response envelope."""


class JumperError(Exception):
    """Base class for all request/response helper errors."""


class NoSuchFileError(JumperError, KeyError):
    def __init__(self, message="no such file"):
        super().__init__(message)

    def __str__(self):
        return self.args[0]


class InvalidFileError(JumperError, ValueError):
    """Raised when a single file is requested for a multi-file field, or the reverse."""


class FileOpenError(JumperError, OSError):
    pass


class MissingTimeError(JumperError, KeyError):
    def __init__(self, message="no time specified"):
        super().__init__(message)

    def __str__(self):
        return self.args[0]


class TimeFormatError(JumperError, ValueError):
    def __init__(self, message="use RFC3339 format string for datetime"):
        super().__init__(message)


class StructDecodeError(JumperError, ValueError):
    pass


class ResponseWriteError(JumperError):
    pass
