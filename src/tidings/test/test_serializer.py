# -*- test-case-name: tidings.test.test_serializer -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Tests for L{tidings._serializer}.
"""

from io import BytesIO

from .._imessage import UnexpectedPayloadError
from .._request import FrozenHTTPRequest
from .._response import FrozenHTTPResponse
from .._serializer import (
    readLine,
    requestFromBytes,
    requestFromDict,
    requestFromStream,
    requestToBytes,
    requestToDict,
    responseFromBytes,
    responseFromDict,
    responseToBytes,
    responseToDict,
)
from .._stream import InputStream, RelativeStream, memoryStream
from .._uri import Uri
from ._trial import TestCase


__all__ = ()


class ReadLineTests(TestCase):
    """
    Tests for L{readLine}.
    """

    def test_lines(self) -> None:
        stream = memoryStream(b"first\r\nsecond\r\n\r\nrest")
        self.assertEqual(readLine(stream), "first")
        self.assertEqual(readLine(stream), "second")
        self.assertEqual(readLine(stream), "")
        self.assertEqual(stream.read(), b"rest")

    def test_unterminated(self) -> None:
        """
        A line at the end of the stream needs no terminator.
        """
        self.assertEqual(readLine(memoryStream(b"last")), "last")

    def test_bareCarriageReturn(self) -> None:
        e = self.assertRaises(
            UnexpectedPayloadError, readLine, memoryStream(b"a\rb\r\n")
        )
        self.assertEqual(str(e), "Unexpected carriage return detected")

    def test_bareLineFeed(self) -> None:
        e = self.assertRaises(
            UnexpectedPayloadError, readLine, memoryStream(b"a\nb\r\n")
        )
        self.assertEqual(str(e), "Unexpected line feed detected")


class RequestSerializationTests(TestCase):
    """
    Tests for serializing requests.
    """

    def test_toBytes(self) -> None:
        request = FrozenHTTPRequest(
            method="POST",
            uri="http://example.com/foo?bar=baz",
            headers=[("accept", "text/html"), ("X-Foo", ["a", "b"])],
            body=memoryStream(b"data"),
        )
        self.assertEqual(
            requestToBytes(request),
            b"POST /foo?bar=baz HTTP/1.1\r\n"
            b"Host: example.com\r\n"
            b"Accept: text/html\r\n"
            b"X-Foo: a\r\n"
            b"X-Foo: b\r\n"
            b"\r\n"
            b"data",
        )

    def test_toBytesWithoutBody(self) -> None:
        """
        Without a body, the blank line after the headers is left out.
        """
        request = FrozenHTTPRequest(uri="http://example.com/")
        self.assertEqual(
            requestToBytes(request),
            b"GET / HTTP/1.1\r\nHost: example.com",
        )

    def test_toBytesRequestTarget(self) -> None:
        request = FrozenHTTPRequest(method="OPTIONS").withRequestTarget("*")
        self.assertEqual(requestToBytes(request), b"OPTIONS * HTTP/1.1")

    def test_fromBytes(self) -> None:
        request = requestFromBytes(
            b"POST /foo?bar=baz HTTP/1.0\r\n"
            b"Host: example.com\r\n"
            b"X-Foo: a\r\n"
            b"x-foo: b\r\n"
            b"\r\n"
            b"data"
        )
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.requestTarget, "/foo?bar=baz")
        self.assertEqual(request.uri, Uri.fromText("/foo?bar=baz"))
        self.assertEqual(request.protocolVersion, "1.0")
        self.assertEqual(request.getHeader("Host"), ["example.com"])
        self.assertEqual(request.getHeader("X-Foo"), ["a", "b"])
        self.assertIsInstance(request.body, RelativeStream)
        self.assertEqual(bytes(request.body), b"data")

    def test_fromBytesAbsoluteTarget(self) -> None:
        request = requestFromBytes(b"GET http://example.com/foo HTTP/1.1")
        self.assertEqual(request.uri, Uri.fromText("http://example.com/foo"))
        self.assertEqual(request.requestTarget, "http://example.com/foo")

    def test_fromBytesAsteriskTarget(self) -> None:
        """
        Asterisk and authority form targets are kept as the request target;
        the URI is empty.
        """
        for target in ("*", "example.com:443"):
            request = requestFromBytes(
                f"OPTIONS {target} HTTP/1.1".encode("ascii")
            )
            self.assertEqual(request.requestTarget, target)
            self.assertEqual(request.uri, Uri())

    def test_fromBytesContinuation(self) -> None:
        """
        Lines starting with whitespace continue the previous header.
        """
        request = requestFromBytes(
            b"GET / HTTP/1.1\r\n"
            b"X-Foo: a\r\n"
            b" b\r\n"
            b"\tc\r\n"
            b"\r\n"
        )
        self.assertEqual(request.getHeader("X-Foo"), ["abc"])
        self.assertEqual(bytes(request.body), b"")

    def test_fromBytesInvalid(self) -> None:
        """
        Malformed messages are rejected.
        """
        for data in (
            b"",
            b"GET /\r\n",
            b"GET / HTTP/1.1 extra\r\n",
            b"GET / HTTP/1.1\r\n b\r\n",
            b"GET / HTTP/1.1\r\nnot a header\r\n",
            b"GET / HTTP/1.1\r\nX-Foo: a\r\nbad\r\n",
            b"GET / HTTP/1.1\nX-Foo: a\n",
        ):
            self.assertRaises(UnexpectedPayloadError, requestFromBytes, data)

    def test_fromStreamNotSeekable(self) -> None:
        e = self.assertRaises(
            UnexpectedPayloadError,
            requestFromStream,
            InputStream(BytesIO(b"GET / HTTP/1.1")),
        )
        self.assertEqual(
            str(e), "Message stream must be both readable and seekable"
        )

    def test_roundTrip(self) -> None:
        data = (
            b"PUT /foo HTTP/1.1\r\n"
            b"Host: example.com\r\n"
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"FOO BAR"
        )
        self.assertEqual(requestToBytes(requestFromBytes(data)), data)

    def test_dict(self) -> None:
        request = FrozenHTTPRequest(
            method="POST",
            uri="http://example.com/foo",
            headers={"X-Foo": ["a", "b"]},
            body=memoryStream(b"data"),
        )
        data = requestToDict(request)
        self.assertEqual(
            data,
            {
                "method": "POST",
                "request_target": "/foo",
                "uri": "http://example.com/foo",
                "protocol_version": "1.1",
                "headers": {"Host": ["example.com"], "X-Foo": ["a", "b"]},
                "body": b"data",
            },
        )

        copy = requestFromDict(data)
        self.assertEqual(copy.method, "POST")
        self.assertEqual(copy.uri, request.uri)
        self.assertEqual(copy.requestTarget, "/foo")
        self.assertEqual(copy.headers.asDict(), request.headers.asDict())
        self.assertEqual(bytes(copy.body), b"data")

    def test_fromDictTextBody(self) -> None:
        data = requestToDict(FrozenHTTPRequest())
        data["body"] = "café"
        request = requestFromDict(data)
        self.assertEqual(bytes(request.body), "café".encode("utf-8"))

    def test_fromDictMissingKey(self) -> None:
        data = requestToDict(FrozenHTTPRequest())
        del data["uri"]
        e = self.assertRaises(UnexpectedPayloadError, requestFromDict, data)
        self.assertEqual(str(e), 'Missing "uri" key in serialized request')


class ResponseSerializationTests(TestCase):
    """
    Tests for serializing responses.
    """

    def test_toBytes(self) -> None:
        response = FrozenHTTPResponse(
            statusCode=404,
            headers={"content-type": "text/plain"},
            body=memoryStream(b"nope"),
        )
        self.assertEqual(
            responseToBytes(response),
            b"HTTP/1.1 404 Not Found\r\n"
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"nope",
        )

    def test_toBytesWithoutHeaders(self) -> None:
        """
        The blank line is always written.
        """
        response = FrozenHTTPResponse(statusCode=204)
        self.assertEqual(
            responseToBytes(response), b"HTTP/1.1 204 No Content\r\n\r\n"
        )

    def test_toBytesWithoutReason(self) -> None:
        response = FrozenHTTPResponse(statusCode=599)
        self.assertEqual(responseToBytes(response), b"HTTP/1.1 599\r\n\r\n")

    def test_fromBytes(self) -> None:
        response = responseFromBytes(
            b"HTTP/1.0 418 Short And Stout\r\n"
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"tea"
        )
        self.assertEqual(response.statusCode, 418)
        self.assertEqual(response.reasonPhrase, "Short And Stout")
        self.assertEqual(response.protocolVersion, "1.0")
        self.assertEqual(response.getHeader("content-type"), ["text/plain"])
        self.assertEqual(bytes(response.body), b"tea")

    def test_fromBytesWithoutReason(self) -> None:
        response = responseFromBytes(b"HTTP/1.1 404\r\n\r\n")
        self.assertEqual(response.statusCode, 404)
        self.assertEqual(response.reasonPhrase, "Not Found")

    def test_fromBytesInvalid(self) -> None:
        for data in (
            b"",
            b"HTTP/1.1\r\n\r\n",
            b"HTTP/1.1 600 Nope\r\n\r\n",
            b"HTTP/1.1 OK\r\n\r\n",
            b"SPDY/3 200 OK\r\n\r\n",
        ):
            e = self.assertRaises(
                UnexpectedPayloadError, responseFromBytes, data
            )
            self.assertTrue(str(e).startswith("No status line detected"))

    def test_roundTrip(self) -> None:
        data = (
            b"HTTP/1.1 201 Created\r\n"
            b"Location: /foo\r\n"
            b"X-Foo: a\r\n"
            b"X-Foo: b\r\n"
            b"\r\n"
            b"created"
        )
        self.assertEqual(responseToBytes(responseFromBytes(data)), data)

    def test_dict(self) -> None:
        response = FrozenHTTPResponse(
            statusCode=201,
            headers={"Location": "/foo"},
            body=memoryStream(b"created"),
        )
        data = responseToDict(response)
        self.assertEqual(
            data,
            {
                "status_code": 201,
                "reason_phrase": "Created",
                "protocol_version": "1.1",
                "headers": {"Location": ["/foo"]},
                "body": b"created",
            },
        )

        copy = responseFromDict(data)
        self.assertEqual(copy.statusCode, 201)
        self.assertEqual(copy.reasonPhrase, "Created")
        self.assertEqual(copy.getHeader("Location"), ["/foo"])
        self.assertEqual(bytes(copy.body), b"created")

    def test_fromDictMissingKey(self) -> None:
        data = responseToDict(FrozenHTTPResponse())
        del data["status_code"]
        e = self.assertRaises(UnexpectedPayloadError, responseFromDict, data)
        self.assertEqual(
            str(e), 'Missing "status_code" key in serialized response'
        )
