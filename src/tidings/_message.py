# -*- test-case-name: tidings.test.test_message -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
HTTP message API.

Conversions and validation shared by requests and responses.
"""

import re
from types import MappingProxyType
from typing import Any, Mapping, Optional

from twisted.python.filepath import FilePath

from ._headers import FrozenHTTPHeaders
from ._imessage import IByteStream, InvalidProtocolVersionError
from ._stream import MEMORY, TEMP, Stream


__all__ = ()


_protocolVersionPattern = re.compile(r"^\d+(?:\.\d+)?\Z")


def normalizeProtocolVersion(version: Any) -> str:
    """
    Validate an HTTP protocol version, eg. C{"1.1"}.

    @raise InvalidProtocolVersionError: If C{version} is not of the form
        C{major[.minor]}.
    """
    if not isinstance(version, str):
        raise InvalidProtocolVersionError(
            f"protocol version must be str, not {type(version).__name__}"
        )
    if _protocolVersionPattern.match(version) is None:
        raise InvalidProtocolVersionError(
            f"Unsupported HTTP protocol version {version!r}"
        )
    return version


def headersFromArgument(headers: Any) -> FrozenHTTPHeaders:
    """
    Convert a headers argument given to a message to L{FrozenHTTPHeaders}.

    @param headers: L{FrozenHTTPHeaders}, a mapping of names to values, an
        iterable of C{(name, value)} pairs, or C{None} for no headers.
    """
    if headers is None:
        return FrozenHTTPHeaders()
    if isinstance(headers, FrozenHTTPHeaders):
        return headers
    return FrozenHTTPHeaders(headers)


def bodyFromArgument(body: Any) -> IByteStream:
    """
    Convert a body argument given to a message to an L{IByteStream}.

    L{MEMORY} and L{TEMP} are opened for reading and writing; other paths and
    file objects are used for reading.

    @raise TypeError: If C{body} is not a stream, a stream identifier, a path
        or a binary file object.
    """
    if IByteStream.providedBy(body):
        return body

    if body in (MEMORY, TEMP):
        return Stream(body, "wb+")

    if isinstance(body, (str, FilePath)) or hasattr(body, "read"):
        return Stream(body, "rb")

    raise TypeError(
        "body must be a stream, a stream identifier, a path or a binary file "
        f"object, not {type(body).__name__}"
    )


def frozenMapping(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """
    Copy a mapping into a read-only mapping.
    """
    if mapping is None:
        return MappingProxyType({})
    return MappingProxyType(dict(mapping))
