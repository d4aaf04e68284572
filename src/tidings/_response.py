# -*- test-case-name: tidings.test.test_response -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
HTTP response API.
"""

from typing import Any, List

from attr import Factory, attrib, attrs, evolve
from attr.validators import instance_of
from werkzeug.http import HTTP_STATUS_CODES
from zope.interface import implementer

from ._attrs_zope import provides
from ._headers import FrozenHTTPHeaders
from ._imessage import (
    HeaderValues,
    IByteStream,
    IHTTPResponse,
    InvalidStatusCodeError,
)
from ._message import (
    bodyFromArgument,
    headersFromArgument,
    normalizeProtocolVersion,
)
from ._stream import memoryStream


__all__ = ()


def normalizeStatusCode(code: Any) -> int:
    """
    @raise InvalidStatusCodeError: If C{code} is not an integer between 100
        and 599, inclusive.
    """
    if isinstance(code, bool) or not isinstance(code, int):
        raise InvalidStatusCodeError(
            f"Invalid status code {code!r}; must be an integer"
        )
    if not 100 <= code <= 599:
        raise InvalidStatusCodeError(
            f"Invalid status code {code!r}; must be an integer between 100 "
            "and 599, inclusive"
        )
    return code


@implementer(IHTTPResponse)
@attrs(frozen=True)
class FrozenHTTPResponse:
    """
    Immutable HTTP response.
    """

    statusCode: int = attrib(default=200, converter=normalizeStatusCode)
    _reasonPhrase: str = attrib(default="", validator=instance_of(str))
    headers: FrozenHTTPHeaders = attrib(
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

    @property
    def reasonPhrase(self) -> str:
        if self._reasonPhrase:
            return self._reasonPhrase
        return HTTP_STATUS_CODES.get(self.statusCode, "")

    def hasHeader(self, name: str) -> bool:
        return self.headers.has(name)

    def getHeader(self, name: str) -> List[str]:
        return self.headers.getValues(name)

    def getHeaderLine(self, name: str) -> str:
        return self.headers.getLine(name)

    def withHeader(
        self, name: str, value: HeaderValues
    ) -> "FrozenHTTPResponse":
        return evolve(self, headers=self.headers.withValues(name, value))

    def withAddedHeader(
        self, name: str, value: HeaderValues
    ) -> "FrozenHTTPResponse":
        return evolve(self, headers=self.headers.withAddedValues(name, value))

    def withoutHeader(self, name: str) -> "FrozenHTTPResponse":
        return evolve(self, headers=self.headers.without(name))

    def withBody(self, body: IByteStream) -> "FrozenHTTPResponse":
        return evolve(self, body=body)

    def withProtocolVersion(self, version: str) -> "FrozenHTTPResponse":
        return evolve(self, protocolVersion=version)

    def withStatus(
        self, code: int, reasonPhrase: str = ""
    ) -> "FrozenHTTPResponse":
        """
        @return: A copy of this response with the given status code.
            The reason phrase is always replaced; when C{reasonPhrase} is
            empty, the standard phrase for C{code} is used.
        """
        return evolve(self, statusCode=code, reasonPhrase=reasonPhrase)
