# -*- test-case-name: tidings.test.test_serializer -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Serialization of HTTP messages to and from HTTP/1.x messages and
dictionaries.
"""

import re
from typing import Any, Dict, List, Mapping, Tuple, Union

from ._headers import (
    HEADER_NAME_ENCODING,
    HEADER_VALUE_ENCODING,
    headerNameAsText,
    headerValueAsText,
)
from ._imessage import (
    IByteStream,
    IHTTPHeaders,
    IHTTPRequest,
    IHTTPResponse,
    UnexpectedPayloadError,
)
from ._request import FrozenHTTPRequest
from ._response import FrozenHTTPResponse
from ._stream import RelativeStream, memoryStream
from ._uri import Uri


__all__ = ()


CR = b"\r"
LF = b"\n"
CRLF = CR + LF

_requestLinePattern = re.compile(
    r"^(?P<method>[!#$%&'*+.^_`|~a-zA-Z0-9-]+) "
    r"(?P<target>[^\s]+) "
    r"HTTP/(?P<version>[0-9]+\.[0-9]+)$"
)
_statusLinePattern = re.compile(
    r"^HTTP/(?P<version>[1-9]\d*\.\d) "
    r"(?P<status>[1-5]\d{2})"
    r"(?:\s+(?P<reason>.+))?$"
)
_headerLinePattern = re.compile(
    r"^(?P<name>[!#$%&'*+.^_`|~0-9a-zA-Z-]+):(?P<value>.*)$"
)
_absoluteTargetPattern = re.compile(r"^https?://")
_uriLessTargetPattern = re.compile(r"^(?:\*|[^/])")


# Writing


def displayHeaderName(name: str) -> str:
    """
    Upper-case the first letter of each C{"-"}-separated part of a header
    name.
    """
    return "-".join(part[:1].upper() + part[1:] for part in name.split("-"))


def serializeHeaders(headers: IHTTPHeaders) -> bytes:
    return CRLF.join(
        displayHeaderName(headerNameAsText(name)).encode(HEADER_NAME_ENCODING)
        + b": "
        + value
        for name, value in headers.rawHeaders
    )


def requestToBytes(request: IHTTPRequest) -> bytes:
    """
    Serialize a request as an HTTP/1.x message.

    The blank line separating headers from the body is only written if there
    is a body.
    """
    data = (
        f"{request.method} {request.requestTarget} "
        f"HTTP/{request.protocolVersion}"
    ).encode(HEADER_VALUE_ENCODING)

    headers = serializeHeaders(request.headers)
    if headers:
        data += CRLF + headers

    body = bytes(request.body)
    if body:
        data += CRLF + CRLF + body

    return data


def responseToBytes(response: IHTTPResponse) -> bytes:
    """
    Serialize a response as an HTTP/1.x message.
    """
    statusLine = f"HTTP/{response.protocolVersion} {response.statusCode}"
    if response.reasonPhrase:
        statusLine += f" {response.reasonPhrase}"

    data = statusLine.encode(HEADER_VALUE_ENCODING)

    headers = serializeHeaders(response.headers)
    if headers:
        data += CRLF + headers

    return data + CRLF + CRLF + bytes(response.body)


# Reading


def readLine(stream: IByteStream) -> str:
    """
    Read a CRLF-terminated line from a stream.

    @return: The line, without its line terminator, decoded as ISO-8859-1.

    @raise UnexpectedPayloadError: If a CR or an LF appears on its own.
    """
    line = b""
    crFound = False

    while not stream.eof():
        char = stream.read(1)
        if not char:
            break

        if crFound:
            if char == LF:
                break
            raise UnexpectedPayloadError("Unexpected carriage return detected")

        if char == LF:
            raise UnexpectedPayloadError("Unexpected line feed detected")

        if char == CR:
            crFound = True
            continue

        line += char

    return headerValueAsText(line)


def splitStream(
    stream: IByteStream,
) -> Tuple[List[Tuple[str, str]], RelativeStream]:
    """
    Read header lines from a stream, up to and including the blank line
    that ends them.

    Lines starting with a space or a tab continue the previous header's
    value.

    @return: C{(name, value)} pairs, and a stream of the remainder of
        C{stream}.

    @raise UnexpectedPayloadError: If a line is not a header line or a
        continuation of one.
    """
    headers: List[List[str]] = []

    line = readLine(stream)
    while line:
        match = _headerLinePattern.match(line)
        if match is not None:
            name, value = match.group("name"), match.group("value")
            headers.append([name, value.lstrip()])
        elif not headers:
            raise UnexpectedPayloadError(f"Invalid header detected: {line!r}")
        elif line[0] not in " \t":
            raise UnexpectedPayloadError(
                f"Invalid header continuation: {line!r}"
            )
        else:
            headers[-1][1] += line.lstrip()

        line = readLine(stream)

    return (
        [(name, value) for name, value in headers],
        RelativeStream(stream, stream.tell()),
    )


def _assertMessageStream(stream: IByteStream) -> None:
    if not stream.isReadable() or not stream.isSeekable():
        raise UnexpectedPayloadError(
            "Message stream must be both readable and seekable"
        )
    stream.rewind()


def requestFromStream(stream: IByteStream) -> FrozenHTTPRequest:
    """
    Parse an HTTP/1.x request from a stream.

    The request's body is a L{RelativeStream} over C{stream}.

    @raise UnexpectedPayloadError: If the request is malformed, or C{stream}
        is not readable and seekable.
    """
    _assertMessageStream(stream)

    requestLine = readLine(stream)
    match = _requestLinePattern.match(requestLine)
    if match is None:
        raise UnexpectedPayloadError(
            f"Invalid request line detected: {requestLine!r}"
        )

    target = match.group("target")
    if _absoluteTargetPattern.match(target) is not None:
        uri = Uri.fromText(target)
    elif _uriLessTargetPattern.match(target) is not None:
        uri = Uri()
    else:
        uri = Uri.fromText(target)

    headers, body = splitStream(stream)

    return FrozenHTTPRequest(
        method=match.group("method"),
        uri=uri,
        headers=headers,
        body=body,
        protocolVersion=match.group("version"),
        requestTarget=target,
    )


def responseFromStream(stream: IByteStream) -> FrozenHTTPResponse:
    """
    Parse an HTTP/1.x response from a stream.

    The response's body is a L{RelativeStream} over C{stream}.

    @raise UnexpectedPayloadError: If the response is malformed, or C{stream}
        is not readable and seekable.
    """
    _assertMessageStream(stream)

    statusLine = readLine(stream)
    match = _statusLinePattern.match(statusLine)
    if match is None:
        raise UnexpectedPayloadError(
            f"No status line detected: {statusLine!r}"
        )

    headers, body = splitStream(stream)

    return FrozenHTTPResponse(
        statusCode=int(match.group("status")),
        reasonPhrase=match.group("reason") or "",
        headers=headers,
        body=body,
        protocolVersion=match.group("version"),
    )


def requestFromBytes(data: bytes) -> FrozenHTTPRequest:
    """
    Parse an HTTP/1.x request.
    """
    return requestFromStream(memoryStream(data))


def responseFromBytes(data: bytes) -> FrozenHTTPResponse:
    """
    Parse an HTTP/1.x response.
    """
    return responseFromStream(memoryStream(data))


# Dictionaries


def _bodyBytes(body: Union[bytes, str]) -> bytes:
    if isinstance(body, str):
        return body.encode("utf-8")
    return body


def _valueFromKey(data: Mapping[str, Any], key: str, kind: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise UnexpectedPayloadError(
            f'Missing "{key}" key in serialized {kind}'
        ) from None


def requestToDict(request: IHTTPRequest) -> Dict[str, Any]:
    return {
        "method": request.method,
        "request_target": request.requestTarget,
        "uri": str(request.uri),
        "protocol_version": request.protocolVersion,
        "headers": request.headers.asDict(),
        "body": bytes(request.body),
    }


def requestFromDict(data: Mapping[str, Any]) -> FrozenHTTPRequest:
    """
    Create a request from a dictionary made by L{requestToDict}.

    @raise UnexpectedPayloadError: If a key is missing.
    """
    values = {
        key: _valueFromKey(data, key, "request")
        for key in (
            "method",
            "request_target",
            "uri",
            "protocol_version",
            "headers",
            "body",
        )
    }

    return FrozenHTTPRequest(
        method=values["method"],
        uri=values["uri"],
        headers=values["headers"],
        body=memoryStream(_bodyBytes(values["body"])),
        protocolVersion=values["protocol_version"],
        requestTarget=values["request_target"],
    )


def responseToDict(response: IHTTPResponse) -> Dict[str, Any]:
    return {
        "status_code": response.statusCode,
        "reason_phrase": response.reasonPhrase,
        "protocol_version": response.protocolVersion,
        "headers": response.headers.asDict(),
        "body": bytes(response.body),
    }


def responseFromDict(data: Mapping[str, Any]) -> FrozenHTTPResponse:
    """
    Create a response from a dictionary made by L{responseToDict}.

    @raise UnexpectedPayloadError: If a key is missing.
    """
    values = {
        key: _valueFromKey(data, key, "response")
        for key in (
            "status_code",
            "reason_phrase",
            "protocol_version",
            "headers",
            "body",
        )
    }

    return FrozenHTTPResponse(
        statusCode=values["status_code"],
        reasonPhrase=values["reason_phrase"],
        headers=values["headers"],
        body=memoryStream(_bodyBytes(values["body"])),
        protocolVersion=values["protocol_version"],
    )
