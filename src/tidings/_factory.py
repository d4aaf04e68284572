# -*- test-case-name: tidings.test.test_factory -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Creation of server requests from a server environment.
"""

import os
from typing import Any, Dict, Mapping, Optional

from ._marshal import (
    HeaderSource,
    ServerParams,
    marshalHeaders,
    marshalMethod,
    marshalProtocolVersion,
    marshalUri,
    normalizeServer,
    parseCookieHeader,
)
from ._serverrequest import FrozenServerRequest, ParsedBody
from ._stream import InputStream
from ._uploads import normalizeUploadedFiles
from ._uri import Uri


__all__ = ()


def queryParamsFromUri(uri: Uri) -> Dict[str, str]:
    """
    @return: The query parameters of C{uri}; if a name is repeated, the last
        value wins.
    """
    return {name: value or "" for name, value in uri.queryParameters()}


def serverRequestFromEnvironment(
    server: Optional[ServerParams] = None,
    query: Optional[Mapping[str, Any]] = None,
    body: ParsedBody = None,
    cookies: Optional[Mapping[str, str]] = None,
    files: Optional[Mapping[str, Any]] = None,
    stream: Any = None,
    headerSource: Optional[HeaderSource] = None,
) -> FrozenServerRequest:
    """
    Create a server request from server variables.

    @param server: Server variables; defaults to the process environment.

    @param query: Query parameters; defaults to those in the request URI.

    @param body: The parsed request body, if any.

    @param cookies: Cookies; defaults to those in the C{Cookie} header.

    @param files: Uploaded file descriptors, as accepted by
        L{tidings.normalizeUploadedFiles}.

    @param stream: The request body; defaults to an L{InputStream} over
        C{wsgi.input} if C{server} is a WSGI environment, or an empty one.

    @param headerSource: A callable returning request headers that the server
        does not pass in C{server}; see L{tidings.normalizeServer}.
    """
    if server is None:
        server = os.environ

    server = normalizeServer(server, headerSource)
    headers = marshalHeaders(server)
    uri = marshalUri(server, headers)

    if cookies is None:
        cookieHeader = server.get("HTTP_COOKIE")
        cookies = parseCookieHeader(cookieHeader) if cookieHeader else {}

    if query is None:
        query = queryParamsFromUri(uri)

    if stream is None:
        stream = InputStream(server.get("wsgi.input"))

    return FrozenServerRequest(
        method=marshalMethod(server),
        uri=uri,
        headers=headers,
        body=stream,
        protocolVersion=marshalProtocolVersion(server),
        serverParams=server,
        uploadedFiles=normalizeUploadedFiles(files or {}),
        cookieParams=cookies,
        queryParams=query,
        parsedBody=body,
    )
