# -*- test-case-name: tidings.test.test_serverrequest -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Server-side HTTP request API.
"""

from typing import Any, Mapping, Optional, Sequence, Union

from attr import attrib, attrs, evolve
from zope.interface import implementer

from ._imessage import IServerRequest, IUploadedFile, InvalidUploadedFileError
from ._message import frozenMapping
from ._request import FrozenHTTPRequest


__all__ = ()


ParsedBody = Union[None, Mapping[str, Any], Sequence[Any]]


def validateUploadedFileTree(tree: Any) -> None:
    """
    @raise InvalidUploadedFileError: If any leaf of C{tree} (a mapping or a
        list, arbitrarily nested) does not provide L{IUploadedFile}.
    """
    if isinstance(tree, Mapping):
        values = tree.values()
    else:
        values = tree

    for value in values:
        if isinstance(value, (Mapping, list, tuple)):
            validateUploadedFileTree(value)
        elif not IUploadedFile.providedBy(value):
            raise InvalidUploadedFileError(
                f"Invalid leaf {value!r} in uploaded files structure"
            )


def uploadedFilesFromArgument(
    files: Optional[Mapping[str, Any]]
) -> Mapping[str, Any]:
    mapping = frozenMapping(files)
    validateUploadedFileTree(mapping)
    return mapping


def parsedBodyFromArgument(body: ParsedBody) -> ParsedBody:
    if body is None or isinstance(body, (Mapping, list, tuple)):
        return body
    raise TypeError(
        "parsed body must be None, a mapping or a sequence, "
        f"not {type(body).__name__}"
    )


@implementer(IServerRequest)
@attrs(frozen=True)
class FrozenServerRequest(FrozenHTTPRequest):
    """
    Immutable HTTP request received by a server, with data from the server
    environment.
    """

    # Compared but not hashed, since the values may be unhashable.
    serverParams: Mapping[str, Any] = attrib(
        default=None, converter=frozenMapping, hash=False
    )
    uploadedFiles: Mapping[str, Any] = attrib(
        default=None, converter=uploadedFilesFromArgument, hash=False
    )
    cookieParams: Mapping[str, str] = attrib(
        default=None, converter=frozenMapping, hash=False
    )
    queryParams: Mapping[str, Any] = attrib(
        default=None, converter=frozenMapping, hash=False
    )
    parsedBody: ParsedBody = attrib(
        default=None, converter=parsedBodyFromArgument, hash=False
    )
    attributes: Mapping[str, Any] = attrib(
        default=None, converter=frozenMapping, hash=False
    )

    def withCookieParams(
        self, cookies: Mapping[str, str]
    ) -> "FrozenServerRequest":
        return evolve(self, cookieParams=cookies)

    def withQueryParams(
        self, query: Mapping[str, Any]
    ) -> "FrozenServerRequest":
        return evolve(self, queryParams=query)

    def withParsedBody(self, body: ParsedBody) -> "FrozenServerRequest":
        return evolve(self, parsedBody=body)

    def withUploadedFiles(
        self, files: Mapping[str, Any]
    ) -> "FrozenServerRequest":
        return evolve(self, uploadedFiles=files)

    def getAttribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def withAttribute(self, name: str, value: Any) -> "FrozenServerRequest":
        attributes = dict(self.attributes)
        attributes[name] = value
        return evolve(self, attributes=attributes)

    def withoutAttribute(self, name: str) -> "FrozenServerRequest":
        attributes = dict(self.attributes)
        attributes.pop(name, None)
        return evolve(self, attributes=attributes)
