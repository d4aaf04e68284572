# -*- test-case-name: tidings.test.test_request -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
HTTP request API.
"""

import re
from typing import Any, List, Optional

from attr import Factory, attrib, attrs, evolve
from attr.converters import optional
from zope.interface import implementer

from ._attrs_zope import provides
from ._headers import FrozenHTTPHeaders
from ._imessage import (
    HeaderValues,
    IByteStream,
    IHTTPRequest,
    InvalidMethodError,
    InvalidRequestTargetError,
)
from ._message import (
    bodyFromArgument,
    headersFromArgument,
    normalizeProtocolVersion,
)
from ._stream import memoryStream
from ._uri import Uri, uriFromArgument


__all__ = ()


_methodPattern = re.compile(r"^[!#$%&'*+.^_`|~0-9a-zA-Z-]+\Z")


def normalizeMethod(method: Any) -> str:
    """
    Validate an HTTP method.
    The method's case is kept as given.

    @raise TypeError: If C{method} is not a L{str}.
    @raise InvalidMethodError: If C{method} is not a valid token.
    """
    if not isinstance(method, str):
        raise TypeError(f"method must be str, not {type(method).__name__}")
    if _methodPattern.match(method) is None:
        raise InvalidMethodError(f"Unsupported HTTP method {method!r}")
    return method


def normalizeRequestTarget(requestTarget: Any) -> str:
    """
    @raise TypeError: If C{requestTarget} is not a L{str}.
    @raise InvalidRequestTargetError: If C{requestTarget} contains whitespace.
    """
    if not isinstance(requestTarget, str):
        raise TypeError(
            "request target must be str, "
            f"not {type(requestTarget).__name__}"
        )
    if re.search(r"\s", requestTarget) is not None:
        raise InvalidRequestTargetError(
            f"Invalid request target {requestTarget!r}; "
            "cannot contain whitespace"
        )
    return requestTarget


def hostFromUri(uri: Uri) -> str:
    """
    @return: A C{Host} header value for the given URI.
    """
    if uri.hasNonStandardPort():
        return f"{uri.host}:{uri.port}"
    return uri.host


def withHostFirst(headers: FrozenHTTPHeaders, host: str) -> FrozenHTTPHeaders:
    """
    @return: A copy of C{headers} with its C{Host} header replaced by
        C{host}, placed before every other header.
    """
    return FrozenHTTPHeaders(
        [("Host", host)] + list(headers.without("host").items())
    )


@implementer(IHTTPRequest)
@attrs(frozen=True)
class FrozenHTTPRequest:
    """
    Immutable HTTP request.

    If no C{Host} header is given, one is derived from the host of C{uri}
    whenever the headers are read.
    """

    method: str = attrib(default="GET", converter=normalizeMethod)
    uri: Uri = attrib(default=None, converter=uriFromArgument)
    _headers: FrozenHTTPHeaders = attrib(
        default=None, converter=headersFromArgument
    )
    body: IByteStream = attrib(
        default=Factory(memoryStream),
        converter=bodyFromArgument,
        validator=provides(IByteStream),
    )
    protocolVersion: str = attrib(
        default="1.1", converter=normalizeProtocolVersion
    )
    _requestTarget: Optional[str] = attrib(
        default=None, converter=optional(normalizeRequestTarget)
    )

    @property
    def headers(self) -> FrozenHTTPHeaders:
        if self._headers.has("host") or not self.uri.host:
            return self._headers
        return withHostFirst(self._headers, hostFromUri(self.uri))

    @property
    def requestTarget(self) -> str:
        if self._requestTarget is not None:
            return self._requestTarget

        target = self.uri.path
        if self.uri.query:
            target += f"?{self.uri.query}"

        return target or "/"

    def hasHeader(self, name: str) -> bool:
        return self.headers.has(name)

    def getHeader(self, name: str) -> List[str]:
        return self.headers.getValues(name)

    def getHeaderLine(self, name: str) -> str:
        return self.headers.getLine(name)

    def withHeader(
        self, name: str, value: HeaderValues
    ) -> "FrozenHTTPRequest":
        return evolve(self, headers=self._headers.withValues(name, value))

    def withAddedHeader(
        self, name: str, value: HeaderValues
    ) -> "FrozenHTTPRequest":
        return evolve(self, headers=self._headers.withAddedValues(name, value))

    def withoutHeader(self, name: str) -> "FrozenHTTPRequest":
        return evolve(self, headers=self._headers.without(name))

    def withBody(self, body: IByteStream) -> "FrozenHTTPRequest":
        return evolve(self, body=body)

    def withProtocolVersion(self, version: str) -> "FrozenHTTPRequest":
        return evolve(self, protocolVersion=version)

    def withMethod(self, method: str) -> "FrozenHTTPRequest":
        return evolve(self, method=method)

    def withRequestTarget(self, requestTarget: str) -> "FrozenHTTPRequest":
        return evolve(self, requestTarget=requestTarget)

    def withUri(
        self, uri: Any, preserveHost: bool = False
    ) -> "FrozenHTTPRequest":
        """
        @param uri: The new URI, as accepted by the initializer.

        @param preserveHost: If true, keep any existing C{Host} header.
            Otherwise the C{Host} header is replaced with the host of C{uri},
            if it has one.
        """
        uri = uriFromArgument(uri)
        headers = self._headers

        if uri.host and not (preserveHost and headers.has("host")):
            headers = withHostFirst(headers, hostFromUri(uri))

        return evolve(self, uri=uri, headers=headers)
