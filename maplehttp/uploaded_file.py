from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from typing import Any

from .errors import UploadError
from .stream import Stream

logger = logging.getLogger(__name__)

UPLOAD_ERR_OK = 0
UPLOAD_ERR_INI_SIZE = 1
UPLOAD_ERR_FORM_SIZE = 2
UPLOAD_ERR_PARTIAL = 3
UPLOAD_ERR_NO_FILE = 4
UPLOAD_ERR_NO_TMP_DIR = 6
UPLOAD_ERR_CANT_WRITE = 7
UPLOAD_ERR_EXTENSION = 8

ERROR_PHRASES = {
    UPLOAD_ERR_OK: "There is no error, the file uploaded with success",
    UPLOAD_ERR_INI_SIZE: "The uploaded file exceeds the maximum upload size of the server",
    UPLOAD_ERR_FORM_SIZE: "The uploaded file exceeds the MAX_FILE_SIZE directive that was specified in the HTML form",
    UPLOAD_ERR_PARTIAL: "The uploaded file was only partially uploaded",
    UPLOAD_ERR_NO_FILE: "No file was uploaded",
    UPLOAD_ERR_NO_TMP_DIR: "No temporary directory. This is a server error, please try again later",
    UPLOAD_ERR_CANT_WRITE: "Failed to write file to disk",
    UPLOAD_ERR_EXTENSION: "A server extension stopped the file upload",
}


class UploadedFile:
    """
    A file received with a request.

    Accepts a Stream, an upload mapping with ``name``, ``type``, ``tmp_name``,
    ``error`` and ``size`` keys, or a path to open.
    """

    MOVE_CHUNK_SIZE = 1024

    def __init__(self, stream: Stream | Mapping[str, Any] | str) -> None:
        self._stream: Stream | str | None = None
        self._size: int | None = None
        self._name: str | None = None
        self._type: str | None = None
        self._tmp: str | None = None
        self._error = UPLOAD_ERR_OK
        self._moved = False

        if isinstance(stream, Stream):
            self._stream = stream
        elif isinstance(stream, Mapping) and "tmp_name" in stream:
            self._name = stream.get("name")
            self._type = stream.get("type")
            self._tmp = stream["tmp_name"]
            self._error = int(stream.get("error", UPLOAD_ERR_OK))
            self._size = stream.get("size")
        elif isinstance(stream, str):
            self._stream = self.with_stream(stream)
        else:
            raise UploadError("The stream argument is not a valid resource")

    def get_stream(self) -> Stream:
        if self._stream is None:
            raise UploadError("No stream exists. You need to construct a new stream")
        if isinstance(self._stream, str):
            self._stream = self.with_stream(self._stream)
        return self._stream

    def move_to(self, target_path: str) -> None:
        if self._moved:
            raise UploadError("File has already been moved")
        directory = os.path.dirname(os.path.abspath(target_path))
        if not os.access(directory, os.W_OK):
            raise UploadError("Target directory is not writable")

        if self._stream is not None:
            self.stream_file(target_path)
        elif self._tmp is not None:
            self.move_uploaded_file(target_path)

        if not self._moved:
            raise UploadError("Failed to move file to target path")

    def stream_file(self, target_path: str) -> None:
        """Copy the stream to ``target_path`` in MOVE_CHUNK_SIZE chunks."""
        stream = self.get_stream()
        stream.seek(0)
        with Stream(target_path, "w") as target:
            while not stream.eof():
                target.write(stream.read(self.MOVE_CHUNK_SIZE))
        # Reopened lazily so the moved file stays reachable through get_stream().
        self._stream = target_path
        self._moved = True
        logger.debug("Streamed upload to %s", target_path)

    def move_uploaded_file(self, target_path: str) -> bool:
        if self._tmp is None or not os.path.isfile(self._tmp):
            raise UploadError(f'Could not upload the file "{self._name}" because of a conflict.')
        try:
            shutil.move(self._tmp, target_path)
        except OSError as exc:
            raise UploadError(f"Failed to move uploaded file: {exc}") from exc
        self._moved = True
        self._stream = target_path
        logger.debug("Moved upload %s to %s", self._tmp, target_path)
        return self._moved

    def get_size(self) -> int | None:
        if self._size is not None:
            return int(self._size)
        if isinstance(self._stream, Stream):
            return self._stream.get_size()
        return None

    def get_error(self) -> int:
        return self._error

    def get_error_phrase(self) -> str | None:
        return ERROR_PHRASES.get(self._error)

    def get_client_filename(self) -> str | None:
        return self._name

    def get_client_media_type(self) -> str | None:
        return self._type

    @staticmethod
    def with_stream(path: str) -> Stream:
        return Stream(path, "r+")
