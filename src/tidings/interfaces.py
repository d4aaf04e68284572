# Copyright (c) 2011-2021. See LICENSE for details.

"""
Interfaces of L{tidings}.
"""

from ._imessage import (
    IByteStream,
    IHTTPHeaders,
    IHTTPMessage,
    IHTTPRequest,
    IHTTPResponse,
    IServerRequest,
    IUploadedFile,
)


__all__ = (
    "IByteStream",
    "IHTTPHeaders",
    "IHTTPMessage",
    "IHTTPRequest",
    "IHTTPResponse",
    "IServerRequest",
    "IUploadedFile",
)
