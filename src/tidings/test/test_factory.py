# -*- test-case-name: tidings.test.test_factory -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Tests for L{tidings._factory}.
"""

from io import BytesIO
from unittest.mock import patch

from .._factory import queryParamsFromUri, serverRequestFromEnvironment
from .._imessage import IServerRequest
from .._stream import InputStream, memoryStream
from .._uploads import UploadedFile
from .._uri import Uri
from ._trial import TestCase


__all__ = ()


class QueryParamsTests(TestCase):
    """
    Tests for L{queryParamsFromUri}.
    """

    def test_queryParams(self) -> None:
        uri = Uri(query="a=1&b=x%20y&a=2&c")
        self.assertEqual(
            queryParamsFromUri(uri), {"a": "2", "b": "x y", "c": ""}
        )


class ServerRequestFromEnvironmentTests(TestCase):
    """
    Tests for L{serverRequestFromEnvironment}.
    """

    def environment(self) -> dict:
        return {
            "REQUEST_METHOD": "POST",
            "SERVER_PROTOCOL": "HTTP/1.0",
            "SERVER_NAME": "example.com",
            "SERVER_PORT": "8080",
            "REQUEST_URI": "/foo?bar=baz",
            "QUERY_STRING": "bar=baz",
            "HTTP_ACCEPT": "text/html",
            "HTTP_COOKIE": "session=abc",
            "CONTENT_TYPE": "text/plain",
        }

    def test_request(self) -> None:
        """
        The method, URI, headers and protocol version come from the server
        variables.
        """
        request = serverRequestFromEnvironment(self.environment())
        self.assertProvides(IServerRequest, request)
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.protocolVersion, "1.0")
        self.assertEqual(
            request.uri, Uri.fromText("http://example.com:8080/foo?bar=baz")
        )
        self.assertEqual(request.getHeaderLine("Accept"), "text/html")
        self.assertEqual(request.getHeaderLine("Content-Type"), "text/plain")
        self.assertEqual(request.getHeaderLine("Host"), "example.com:8080")
        self.assertFalse(request.hasHeader("Cookie"))
        self.assertEqual(request.serverParams, self.environment())

    def test_defaults(self) -> None:
        """
        Query and cookie parameters default to those in the server
        variables; files and the parsed body default to empty.
        """
        request = serverRequestFromEnvironment(self.environment())
        self.assertEqual(request.queryParams, {"bar": "baz"})
        self.assertEqual(request.cookieParams, {"session": "abc"})
        self.assertEqual(request.uploadedFiles, {})
        self.assertIdentical(request.parsedBody, None)
        self.assertIsInstance(request.body, InputStream)
        self.assertEqual(bytes(request.body), b"")

    def test_overrides(self) -> None:
        """
        Explicit query, cookie, body and stream arguments are used.
        """
        stream = memoryStream(b"a=b")
        request = serverRequestFromEnvironment(
            self.environment(),
            query={"q": "1"},
            body={"a": "b"},
            cookies={"theme": "dark"},
            stream=stream,
        )
        self.assertEqual(request.queryParams, {"q": "1"})
        self.assertEqual(request.parsedBody, {"a": "b"})
        self.assertEqual(request.cookieParams, {"theme": "dark"})
        self.assertIdentical(request.body, stream)

    def test_files(self) -> None:
        """
        File descriptors are normalized to L{UploadedFile}s.
        """
        request = serverRequestFromEnvironment(
            self.environment(),
            files={"avatar": {"tmp_name": "/tmp/a", "size": 1, "error": 0}},
        )
        self.assertIsInstance(request.uploadedFiles["avatar"], UploadedFile)

    def test_wsgiInput(self) -> None:
        """
        The body is read from C{wsgi.input} if there is one.
        """
        environment = self.environment()
        environment["wsgi.input"] = BytesIO(b"FOO BAR")
        request = serverRequestFromEnvironment(environment)
        self.assertEqual(bytes(request.body), b"FOO BAR")

    def test_headerSource(self) -> None:
        """
        An C{Authorization} header missing from the server variables is taken
        from the header source.
        """
        request = serverRequestFromEnvironment(
            self.environment(),
            headerSource=lambda: {"Authorization": "Basic abc"},
        )
        self.assertEqual(request.getHeaderLine("Authorization"), "Basic abc")
        self.assertEqual(
            request.serverParams["HTTP_AUTHORIZATION"], "Basic abc"
        )

    def test_processEnvironment(self) -> None:
        """
        Without server variables, the process environment is used.
        """
        with patch.dict(
            "os.environ",
            {"REQUEST_METHOD": "PUT", "SERVER_NAME": "env.example.com"},
            clear=True,
        ):
            request = serverRequestFromEnvironment()
        self.assertEqual(request.method, "PUT")
        self.assertEqual(request.uri.host, "env.example.com")

    def test_queryNotUTF8(self) -> None:
        """
        A query string with percent-encoded bytes that are not UTF-8 still
        gives a request; the undecodable parameter is left encoded.
        """
        request = serverRequestFromEnvironment({"QUERY_STRING": "q=caf%E9"})
        self.assertEqual(request.uri.query, "q=caf%E9")
        self.assertEqual(request.queryParams, {"q": "caf%E9"})

    def test_emptyEnvironment(self) -> None:
        """
        An empty environment gives a C{GET} of C{/}.
        """
        request = serverRequestFromEnvironment({})
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.requestTarget, "/")
        self.assertEqual(str(request.uri), "http:/")
