# -*- test-case-name: tidings.test -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Immutable HTTP messages: headers, URIs, requests, responses, byte streams and
uploaded files, and the marshaling of requests from a server environment.
"""

from ._factory import serverRequestFromEnvironment
from ._headers import (
    FrozenHTTPHeaders,
    MutableHTTPHeaders,
    assertValidName,
    filterValue,
    isValidValue,
)
from ._imessage import (
    InvalidHeaderNameError,
    InvalidHeaderValueError,
    InvalidMethodError,
    InvalidPathError,
    InvalidPortError,
    InvalidProtocolVersionError,
    InvalidQueryError,
    InvalidRequestTargetError,
    InvalidStatusCodeError,
    InvalidUploadedFileError,
    InvalidURIComponentError,
    InvalidURIError,
    UnexpectedPayloadError,
    UnsupportedSchemeError,
    UploadedFileError,
)
from ._marshal import (
    getHeaderFromMapping,
    marshalHeaders,
    marshalHostAndPort,
    marshalMethod,
    marshalProtocolVersion,
    marshalRequestPath,
    marshalUri,
    normalizeServer,
    parseCookieHeader,
)
from ._request import FrozenHTTPRequest
from ._response import FrozenHTTPResponse
from ._serializer import (
    requestFromBytes,
    requestFromDict,
    requestFromStream,
    requestToBytes,
    requestToDict,
    responseFromBytes,
    responseFromDict,
    responseFromStream,
    responseToBytes,
    responseToDict,
)
from ._serverrequest import FrozenServerRequest
from ._stream import (
    MEMORY,
    TEMP,
    CallbackStream,
    InputStream,
    InvalidPointerPositionError,
    RelativeStream,
    Stream,
    StreamState,
    StreamUnusableError,
    memoryStream,
)
from ._uploads import UploadedFile, UploadError, normalizeUploadedFiles
from ._uri import Uri
from ._version import __version__ as _incremental_version


__all__ = (
    "CallbackStream",
    "FrozenHTTPHeaders",
    "FrozenHTTPRequest",
    "FrozenHTTPResponse",
    "FrozenServerRequest",
    "InputStream",
    "InvalidHeaderNameError",
    "InvalidHeaderValueError",
    "InvalidMethodError",
    "InvalidPathError",
    "InvalidPointerPositionError",
    "InvalidPortError",
    "InvalidProtocolVersionError",
    "InvalidQueryError",
    "InvalidRequestTargetError",
    "InvalidStatusCodeError",
    "InvalidUploadedFileError",
    "InvalidURIComponentError",
    "InvalidURIError",
    "MEMORY",
    "MutableHTTPHeaders",
    "RelativeStream",
    "Stream",
    "StreamState",
    "StreamUnusableError",
    "TEMP",
    "UnexpectedPayloadError",
    "UnsupportedSchemeError",
    "UploadError",
    "UploadedFile",
    "UploadedFileError",
    "Uri",
    "__author__",
    "__copyright__",
    "__license__",
    "__version__",
    "assertValidName",
    "filterValue",
    "getHeaderFromMapping",
    "isValidValue",
    "marshalHeaders",
    "marshalHostAndPort",
    "marshalMethod",
    "marshalProtocolVersion",
    "marshalRequestPath",
    "marshalUri",
    "memoryStream",
    "normalizeServer",
    "normalizeUploadedFiles",
    "parseCookieHeader",
    "requestFromBytes",
    "requestFromDict",
    "requestFromStream",
    "requestToBytes",
    "requestToDict",
    "responseFromBytes",
    "responseFromDict",
    "responseFromStream",
    "responseToBytes",
    "responseToDict",
    "serverRequestFromEnvironment",
)


# The version as a str
__version__ = _incremental_version.base()

__author__ = "The Tidings contributors"
__license__ = "MIT"
__copyright__ = f"Copyright 2011-2021 {__author__}"
