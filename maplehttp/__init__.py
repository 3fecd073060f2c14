from maplehttp.stream import Stream
from maplehttp.headers import Headers
from maplehttp.uri import Uri
from maplehttp.message import Message
from maplehttp.request import Request
from maplehttp.response import PHRASES, Response, ResponseFactory
from maplehttp.server_request import ServerRequest
from maplehttp.uploaded_file import UploadedFile
from maplehttp.cookies import Cookies
from maplehttp.compression import decode_body, decode_stream
from maplehttp.errors import (
    MapleHttpError,
    StreamError,
    RequestError,
    ResponseError,
    InvalidArgumentError,
    UploadError,
)

__all__ = [
    "Stream",
    "Headers",
    "Uri",
    "Message",
    "Request",
    "Response",
    "ResponseFactory",
    "PHRASES",
    "ServerRequest",
    "UploadedFile",
    "Cookies",
    "decode_body",
    "decode_stream",
    "MapleHttpError",
    "StreamError",
    "RequestError",
    "ResponseError",
    "InvalidArgumentError",
    "UploadError",
]
