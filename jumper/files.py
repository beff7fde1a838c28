"""Uploaded file references handed out by the request adapter."""

import os
import logging
import tempfile
from shutil import copyfileobj
from typing import Optional

from werkzeug.datastructures import FileStorage

from jumper.errors import FileOpenError

logger = logging.getLogger('jumper')

DEFAULT_SPOOL_SIZE = 32 << 10


class File:
    """An open copy of an upload plus its metadata.

    Returned by ``Request.get_file`` / ``Request.get_files``. Every call
    opens a fresh handle with its own position, so closing one handle never
    affects another. The caller owns the handle and is responsible for
    closing it, either explicitly or by using the file as a context manager.
    """

    def __init__(self, storage: FileStorage, stream):
        self._storage = storage
        self._stream = stream
        self.filename: str = storage.filename or ""
        self.content_type: str = storage.content_type or ""
        self.size: int = self._measure()

    @classmethod
    def open(cls, storage: FileStorage, spool_size: int = DEFAULT_SPOOL_SIZE) -> "File":
        """Copy the upload into a private spooled stream; I/O failures become FileOpenError."""
        stream = None
        try:
            source = storage.stream
            if source.closed:
                raise OSError(f"upload stream for {storage.filename!r} is closed")
            stream = tempfile.SpooledTemporaryFile(max_size=spool_size, mode="w+b")
            source.seek(0)
            copyfileobj(source, stream)
            stream.seek(0)
            return cls(storage, stream)
        except (OSError, ValueError) as e:
            if stream is not None:
                stream.close()
            logger.error(f"Error opening uploaded file {storage.filename!r}: {str(e)}")
            raise FileOpenError(str(e)) from e

    def _measure(self) -> int:
        position = self._stream.tell()
        self._stream.seek(0, os.SEEK_END)
        size = self._stream.tell()
        self._stream.seek(position)
        return size

    @property
    def headers(self):
        return self._storage.headers

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._stream.seek(offset, whence)

    def tell(self) -> int:
        return self._stream.tell()

    def save(self, dst, buffer_size: int = 16384) -> None:
        """Copy the whole upload to a path or writable file object.

        The read position of this handle is left where it was.
        """
        position = self._stream.tell()
        self._stream.seek(0)
        try:
            if isinstance(dst, (str, os.PathLike)):
                with open(dst, "wb") as f:
                    copyfileobj(self._stream, f, buffer_size)
            else:
                copyfileobj(self._stream, dst, buffer_size)
        finally:
            self._stream.seek(position)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "File":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None

    def __repr__(self) -> str:
        return f"<File {self.filename!r} ({self.content_type}, {self.size} bytes)>"
