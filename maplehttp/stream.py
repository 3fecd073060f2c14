from __future__ import annotations

import io
import logging
import os
import re
import tempfile
from typing import IO, Any

from .errors import StreamError

logger = logging.getLogger(__name__)

_READABLE_MATCH = re.compile(r"r|a\+|ab\+|w\+|wb\+|x\+|xb\+|c\+|cb\+")
_WRITABLE_MATCH = re.compile(r"a|w|r\+|rb\+|rw|x|c")

# "c" opens for writing without truncating, creating the file if needed.
_OPEN_FLAGS = {
    "r": os.O_RDONLY,
    "r+": os.O_RDWR,
    "w": os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    "w+": os.O_RDWR | os.O_CREAT | os.O_TRUNC,
    "a": os.O_WRONLY | os.O_CREAT | os.O_APPEND,
    "a+": os.O_RDWR | os.O_CREAT | os.O_APPEND,
    "x": os.O_WRONLY | os.O_CREAT | os.O_EXCL,
    "x+": os.O_RDWR | os.O_CREAT | os.O_EXCL,
    "c": os.O_WRONLY | os.O_CREAT,
    "c+": os.O_RDWR | os.O_CREAT,
}

_STAT_FIELDS = ("dev", "ino", "mode", "nlink", "uid", "gid", "size", "atime", "mtime", "ctime")


def _fd_seekable(fd: int) -> bool:
    try:
        os.lseek(fd, 0, os.SEEK_CUR)
    except OSError:
        return False
    return True


class Stream:
    """
    Byte stream over a file, an in-memory buffer or a process stream.

    Readable/writable flags are derived from the open mode; seekability is
    whatever the underlying resource reports. Once closed or detached every
    operation other than ``close``/``detach`` raises ``StreamError``.
    """

    TEMP = "temp"
    MEMORY = "memory"
    STDIN = "stdin"
    STDOUT = "stdout"
    STDERR = "stderr"

    DEFAULT_WRAPPER = TEMP
    # In-memory limit before a TEMP stream spills to a temporary file.
    TEMP_MAX_MEMORY = 2 * 1024 * 1024

    _STD_DESCRIPTORS = {STDIN: 0, STDOUT: 1, STDERR: 2}

    def __init__(self, stream: str | IO[bytes] | None = None, mode: str = "r+") -> None:
        if stream is None:
            stream = self.DEFAULT_WRAPPER

        if isinstance(stream, str):
            self._stream = stream
            self._mode = mode
            self._resource: IO[bytes] | None = self._open(stream, mode)
            self._has_descriptor = stream not in (self.TEMP, self.MEMORY)
        elif hasattr(stream, "read") or hasattr(stream, "write"):
            resource_mode = getattr(stream, "mode", None)
            self._stream = type(stream).__name__
            self._mode = resource_mode if isinstance(resource_mode, str) else "r+"
            self._resource = stream
            self._has_descriptor = not isinstance(
                stream, (io.BytesIO, tempfile.SpooledTemporaryFile)
            )
        else:
            raise StreamError(f"Unsupported stream resource: {stream!r}")

        self._meta: dict[str, Any] = {}
        self.get_metadata()

    def _open(self, stream: str, mode: str) -> IO[bytes]:
        if stream == self.TEMP:
            return tempfile.SpooledTemporaryFile(max_size=self.TEMP_MAX_MEMORY, mode="w+b")
        if stream == self.MEMORY:
            return io.BytesIO()

        base = mode.replace("b", "").replace("t", "")
        flags = _OPEN_FLAGS.get(base)
        if flags is None:
            raise StreamError(f"Failed to open stream: invalid mode {mode!r}")

        try:
            if stream in self._STD_DESCRIPTORS:
                fd = os.dup(self._STD_DESCRIPTORS[stream])
            else:
                fd = os.open(stream, flags | getattr(os, "O_BINARY", 0), 0o666)
        except OSError as exc:
            raise StreamError(f"Failed to open stream: {exc}") from exc

        if flags & os.O_RDWR:
            py_mode = "r+b"
        elif flags & os.O_APPEND:
            py_mode = "ab"
        elif flags & os.O_WRONLY:
            py_mode = "wb"
        else:
            py_mode = "rb"
        # Pipes and terminals cannot be opened for update.
        if py_mode == "r+b" and stream in self._STD_DESCRIPTORS and not _fd_seekable(fd):
            py_mode = "rb" if stream == self.STDIN else "wb"

        try:
            resource = os.fdopen(fd, py_mode)
        except (OSError, ValueError) as exc:
            os.close(fd)
            raise StreamError(f"Failed to open stream: {exc}") from exc
        logger.debug("Opened stream %s (%s)", stream, mode)
        return resource

    def __repr__(self) -> str:
        state = "closed" if self._resource is None else self._mode
        return f"<Stream {self._stream} ({state})>"

    def __str__(self) -> str:
        return bytes(self).decode("utf-8", errors="replace")

    def __bytes__(self) -> bytes:
        self.rewind()
        return self.get_contents()

    def __enter__(self) -> Stream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_resource(self) -> IO[bytes]:
        if self._resource is None:
            raise StreamError(f'The stream "{self._stream}" is closed or detached')
        return self._resource

    def get_stream(self) -> str:
        return self._stream

    def get_resource(self) -> IO[bytes] | None:
        return self._resource

    def close(self) -> None:
        if self._resource is None:
            return
        self._resource.close()
        self._resource = None
        logger.debug("Closed stream %s", self._stream)

    def detach(self) -> IO[bytes] | None:
        """
        Separate the underlying resource from the stream without closing it.

        The caller owns the returned handle; the stream is unusable afterwards.
        """
        resource = self._resource
        self._resource = None
        if resource is not None:
            logger.debug("Detached stream %s", self._stream)
        return resource

    def is_seekable(self) -> bool:
        return bool(self._meta.get("seekable")) and self._resource is not None

    def is_writable(self) -> bool:
        return bool(self._meta.get("writable")) and self._resource is not None

    def is_readable(self) -> bool:
        return bool(self._meta.get("readable")) and self._resource is not None

    def stats(self, key: str | None = None) -> Any:
        """
        fstat() information for descriptor-backed streams.

        Returns None for pure memory buffers, or if ``key`` is unknown.
        """
        resource = self._require_resource()
        if not self._has_descriptor:
            return None
        try:
            fd = resource.fileno()
        except (AttributeError, OSError, ValueError):
            return None
        if self._meta.get("writable") and hasattr(resource, "flush"):
            resource.flush()
        try:
            st = os.fstat(fd)
        except OSError:
            return None
        stats = {name: getattr(st, f"st_{name}") for name in _STAT_FIELDS}
        return stats if key is None else stats.get(key)

    def get_size(self) -> int | None:
        size = self.stats("size")
        if size is not None:
            return size
        resource = self._require_resource()
        if not self.is_seekable():
            return None
        try:
            position = resource.tell()
            size = resource.seek(0, os.SEEK_END)
            resource.seek(position)
        except OSError as exc:
            raise StreamError(f"Could not determine stream size: {exc}") from exc
        return size

    def tell(self) -> int:
        resource = self._require_resource()
        try:
            return resource.tell()
        except OSError as exc:
            raise StreamError(f"Could not tell stream position: {exc}") from exc

    def eof(self) -> bool:
        resource = self._resource
        if resource is None:
            return True
        if self.is_seekable():
            size = self.get_size()
            return size is not None and resource.tell() >= size
        peek = getattr(resource, "peek", None)
        if peek is not None:
            return peek(1) == b""
        return False

    def get_line(self) -> bytes | None:
        """Read the next line with surrounding whitespace stripped, None at EOF."""
        resource = self._require_resource()
        if not self.is_readable():
            raise StreamError("Could not read from stream")
        line = resource.readline()
        if not line:
            return None
        return line.strip()

    def get_lines(self, start: int, end: int) -> bytes:
        """Return lines ``start`` through ``end`` (1-based, inclusive) from the top of the stream."""
        resource = self._require_resource()
        if not self.is_readable():
            raise StreamError("Could not read from stream")
        self.rewind()
        out = []
        for number, line in enumerate(iter(resource.readline, b""), start=1):
            if number > end:
                break
            if number >= start:
                out.append(line)
        return b"".join(out)

    def clean(self) -> None:
        resource = self._require_resource()
        try:
            resource.truncate(0)
            if self.is_seekable():
                resource.seek(0)
        except OSError as exc:
            raise StreamError(f"Could not truncate stream: {exc}") from exc

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        resource = self._require_resource()
        if not self.is_seekable():
            raise StreamError(f'The stream "{self._stream} ({self._mode})" is not seekable!')
        try:
            resource.seek(offset, whence)
        except OSError as exc:
            raise StreamError(f"Could not seek stream: {exc}") from exc

    def rewind(self) -> None:
        self.seek(0)

    def write(self, data: bytes | str) -> int:
        resource = self._require_resource()
        if not self.is_writable():
            raise StreamError(f'The stream "{self._stream} ({self._mode})" is not writable')
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            written = resource.write(data)
        except OSError as exc:
            raise StreamError(f"Could not write to stream: {exc}") from exc
        return len(data) if written is None else written

    def read(self, length: int) -> bytes:
        resource = self._require_resource()
        if not self.is_readable():
            raise StreamError("Could not read from stream")
        try:
            data = resource.read(length)
        except OSError as exc:
            raise StreamError(f"Could not read from stream: {exc}") from exc
        return data or b""

    def get_contents(self) -> bytes:
        """Return the remaining contents from the current position."""
        resource = self._require_resource()
        if not self.is_readable():
            raise StreamError("Could not get contents of stream")
        try:
            data = resource.read()
        except OSError as exc:
            raise StreamError(f"Could not get contents of stream: {exc}") from exc
        return data or b""

    def get_metadata(self, key: str | None = None) -> Any:
        resource = self._require_resource()
        try:
            seekable = bool(resource.seekable())
        except (AttributeError, ValueError):
            seekable = False
        self._meta = {
            "stream_type": self._stream,
            "mode": self._mode,
            "seekable": seekable,
            "readable": bool(_READABLE_MATCH.search(self._mode)),
            "writable": bool(_WRITABLE_MATCH.search(self._mode)),
            "uri": getattr(resource, "name", self._stream),
        }
        return dict(self._meta) if key is None else self._meta.get(key)
