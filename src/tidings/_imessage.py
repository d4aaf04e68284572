# Copyright (c) 2011-2021. See LICENSE for details.

"""
Interfaces and exceptions related to HTTP messages.

Do not import directly from here, except:
 - From interfaces.py.
 - From implementations of these interfaces.
"""

from typing import (
    Any,
    Iterable,
    List,
    Mapping,
    MutableSequence,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from zope.interface import Attribute, Interface


__all__ = ()


RawHeader = Tuple[bytes, bytes]
RawHeaders = Sequence[RawHeader]
MutableRawHeaders = MutableSequence[RawHeader]

HeaderValue = Union[str, int, float]
HeaderValues = Union[HeaderValue, Sequence[HeaderValue]]


# Header errors


class InvalidHeaderNameError(ValueError):
    """
    A header name is not a valid HTTP token.
    """


class InvalidHeaderValueError(ValueError):
    """
    A header value is of the wrong type or contains characters that are not
    allowed in an HTTP header.
    """


# URI errors


class InvalidURIError(ValueError):
    """
    A URI string could not be parsed.
    """


class InvalidURIComponentError(ValueError):
    """
    A URI component was rejected.
    """


class UnsupportedSchemeError(InvalidURIComponentError):
    """
    A URI scheme is not in the allowed schemes.
    """


class InvalidPortError(InvalidURIComponentError):
    """
    A URI port is not an integer between 1 and 65535.
    """


class InvalidPathError(InvalidURIComponentError):
    """
    A URI path is not text or contains a query or fragment delimiter.
    """


class InvalidQueryError(InvalidURIComponentError):
    """
    A URI query is not text or contains a fragment delimiter.
    """


# Message errors


class InvalidMethodError(ValueError):
    """
    An HTTP method is not a valid token.
    """


class InvalidRequestTargetError(ValueError):
    """
    A request target contains whitespace.
    """


class InvalidStatusCodeError(ValueError):
    """
    A response status code is not an integer between 100 and 599.
    """


class InvalidProtocolVersionError(ValueError):
    """
    An HTTP protocol version is not of the form C{major[.minor]}.
    """


class UnexpectedPayloadError(ValueError):
    """
    A serialized message or environment value could not be understood.
    """


# Uploaded file errors


class InvalidUploadedFileError(ValueError):
    """
    An uploaded file descriptor is malformed.
    """


class UploadedFileError(RuntimeError):
    """
    An uploaded file is not in a state that allows the requested operation.
    """


class IHTTPHeaders(Interface):
    """
    HTTP entity headers.

    Header names are looked up case-insensitively, but the casing used when a
    header was first added is kept for output.
    Every header name maps to an ordered sequence of text values.

    Header names and values are made available as bytes through
    C{rawHeaders}, encoded as ISO-8859-1.
    """

    rawHeaders: RawHeaders = Attribute(
        """
        Raw header data as a tuple in the from: C{((name, value), ...)}.
        C{name} and C{value} are bytes.
        Names are given in their original casing.
        Headers with multiple values are provided as separate name and value
        pairs.
        """
    )

    def getValues(name: str) -> List[str]:
        """
        Get the values associated with the given header name.

        @param name: The name of the header, in any casing.

        @return: The values of the header, in the order they were added, or an
            empty list if there is no such header.
        """

    def getLine(name: str) -> str:
        """
        Get the values associated with the given header name, joined with
        C{","}.

        @param name: The name of the header, in any casing.

        @return: The joined values, or an empty string if there is no such
            header.
        """

    def has(name: str) -> bool:
        """
        @param name: The name of the header, in any casing.

        @return: C{True} if a header with the given name is present.
        """

    def items() -> Iterable[Tuple[str, List[str]]]:
        """
        @return: C{(name, values)} pairs in insertion order, names given in
            their original casing.
        """


class IByteStream(Interface):
    """
    A readable, writable and/or seekable sequence of bytes.

    Streams carry a cursor position and are not safe to use from more than
    one caller at a time.
    """

    def isReadable() -> bool:
        """
        @return: C{True} if L{read} and L{getContents} may be called.
        """

    def isWritable() -> bool:
        """
        @return: C{True} if L{write} may be called.
        """

    def isSeekable() -> bool:
        """
        @return: C{True} if L{seek} and L{rewind} may be called.
        """

    def read(length: int) -> bytes:
        """
        Read up to C{length} bytes from the current position.

        @return: The bytes read; C{b""} at the end of the stream.

        @raise StreamUnusableError: If the stream is not readable, or has been
            closed or detached.
        """

    def write(data: bytes) -> int:
        """
        Write bytes at the current position.

        @return: The number of bytes written.

        @raise StreamUnusableError: If the stream is not writable, or has been
            closed or detached.
        """

    def seek(offset: int, whence: int = 0) -> None:
        """
        Move the current position.

        @param whence: One of L{os.SEEK_SET}, L{os.SEEK_CUR} or
            L{os.SEEK_END}.

        @raise StreamUnusableError: If the stream is not seekable, or has been
            closed or detached.
        """

    def rewind() -> None:
        """
        Seek to the beginning of the stream.
        """

    def tell() -> int:
        """
        @return: The current position.

        @raise StreamUnusableError: If the stream has been closed or detached.
        """

    def eof() -> bool:
        """
        @return: C{True} if the current position is at the end of the stream.
            Closed and detached streams are always at their end.
        """

    def getSize() -> Optional[int]:
        """
        @return: The size of the stream in bytes, or C{None} if it is not
            known.
        """

    def getContents() -> bytes:
        """
        Read everything from the current position to the end of the stream.

        @raise StreamUnusableError: If the stream is not readable.
        """

    def getMetadata(key: Optional[str] = None) -> Any:
        """
        @param key: A metadata key, or C{None} for all metadata.

        @return: A L{dict} of metadata, or the value for C{key} (C{None} if the
            key is not known).
        """

    def close() -> None:
        """
        Close the stream and release its underlying resource.
        Closing a closed or detached stream does nothing.
        """

    def detach() -> Any:
        """
        Separate the underlying resource from the stream without closing it.
        The stream is unusable afterwards.

        @return: The underlying resource, or C{None} if there is none.
        """

    def __bytes__() -> bytes:
        """
        @return: The complete contents of the stream.
        """


class IHTTPMessage(Interface):
    """
    An immutable HTTP message.
    """

    protocolVersion: str = Attribute("HTTP protocol version, eg. C{'1.1'}.")

    headers: IHTTPHeaders = Attribute("Entity headers.")

    body: IByteStream = Attribute("Message body.")

    def hasHeader(name: str) -> bool:
        """
        @return: C{True} if the message has a header with the given name.
        """

    def getHeader(name: str) -> List[str]:
        """
        @return: The values of the header with the given name.
        """

    def getHeaderLine(name: str) -> str:
        """
        @return: The values of the header with the given name, joined with
            C{","}.
        """

    def withHeader(name: str, value: HeaderValues) -> "IHTTPMessage":
        """
        @return: A copy of this message with the given header replaced.

        @raise InvalidHeaderNameError: If C{name} is not a valid token.
        @raise InvalidHeaderValueError: If any value is invalid.
        """

    def withAddedHeader(name: str, value: HeaderValues) -> "IHTTPMessage":
        """
        @return: A copy of this message with the given values appended to the
            given header.

        @raise InvalidHeaderNameError: If C{name} is not a valid token.
        @raise InvalidHeaderValueError: If any value is invalid.
        """

    def withoutHeader(name: str) -> "IHTTPMessage":
        """
        @return: A copy of this message without the given header.
        """

    def withBody(body: IByteStream) -> "IHTTPMessage":
        """
        @return: A copy of this message with the given body.
        """

    def withProtocolVersion(version: str) -> "IHTTPMessage":
        """
        @return: A copy of this message with the given protocol version.

        @raise InvalidProtocolVersionError: If C{version} is malformed.
        """


class IHTTPRequest(IHTTPMessage):
    """
    An immutable HTTP request.
    """

    method: str = Attribute("Request method.")

    uri = Attribute("Request URI, as a L{tidings.Uri}.")

    requestTarget: str = Attribute(
        """
        Request target, as sent on the request line.
        Defaults to the path and query of C{uri}, or C{"/"}.
        """
    )

    def withMethod(method: str) -> "IHTTPRequest":
        """
        @return: A copy of this request with the given method.

        @raise InvalidMethodError: If C{method} is not a valid token.
        """

    def withUri(uri: Any, preserveHost: bool = False) -> "IHTTPRequest":
        """
        @return: A copy of this request with the given URI.
            Unless C{preserveHost} is true and a C{Host} header is present, the
            C{Host} header is replaced with the host of the new URI.
        """

    def withRequestTarget(requestTarget: str) -> "IHTTPRequest":
        """
        @return: A copy of this request with the given request target.

        @raise InvalidRequestTargetError: If C{requestTarget} contains
            whitespace.
        """


class IHTTPResponse(IHTTPMessage):
    """
    An immutable HTTP response.
    """

    statusCode: int = Attribute("Response status code.")

    reasonPhrase: str = Attribute(
        """
        Response reason phrase.
        Defaults to the standard phrase for C{statusCode}.
        """
    )

    def withStatus(code: int, reasonPhrase: str = "") -> "IHTTPResponse":
        """
        @return: A copy of this response with the given status and reason
            phrase.

        @raise InvalidStatusCodeError: If C{code} is not an integer between
            100 and 599.
        """


class IUploadedFile(Interface):
    """
    A file uploaded as part of a request.
    """

    size: Optional[int] = Attribute("Size of the file in bytes.")

    error: int = Attribute("Upload status, one of L{tidings.UploadError}.")

    clientFilename: Optional[str] = Attribute("File name sent by the client.")

    clientMediaType: Optional[str] = Attribute(
        "Media type sent by the client."
    )

    def getStream() -> IByteStream:
        """
        @return: A stream of the file's contents.

        @raise UploadedFileError: If the upload failed or the file has been
            moved.
        """

    def moveTo(targetPath: str) -> None:
        """
        Move the file to the given path.

        @raise UploadedFileError: If the upload failed or the file has already
            been moved.
        """


class IServerRequest(IHTTPRequest):
    """
    An immutable HTTP request as seen by a server, including data derived from
    the server environment.
    """

    serverParams: Mapping[str, Any] = Attribute("Server variables.")

    cookieParams: Mapping[str, str] = Attribute("Cookies sent by the client.")

    queryParams: Mapping[str, Any] = Attribute("Query parameters.")

    parsedBody = Attribute(
        "Parsed request body: C{None}, a mapping or a sequence."
    )

    uploadedFiles: Mapping[str, Any] = Attribute(
        "Tree of L{IUploadedFile} providers."
    )

    attributes: Mapping[str, Any] = Attribute(
        "Application attributes derived from the request."
    )

    def getAttribute(name: str, default: Any = None) -> Any:
        """
        @return: The attribute with the given name, or C{default}.
        """

    def withAttribute(name: str, value: Any) -> "IServerRequest":
        """
        @return: A copy of this request with the given attribute set.
        """

    def withoutAttribute(name: str) -> "IServerRequest":
        """
        @return: A copy of this request without the given attribute.
        """
