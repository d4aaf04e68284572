# -*- test-case-name: tidings.test.test_marshal -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Marshaling of request data from CGI-style server variables.

Server variables are a flat mapping such as C{os.environ} in a CGI script or
a WSGI C{environ}.
Nothing here raises for missing variables; every value falls back to an
empty or default value.
"""

import re
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from werkzeug.http import parse_cookie

from twisted.logger import Logger

from ._imessage import UnexpectedPayloadError
from ._uri import Uri


__all__ = ()


log = Logger()

ServerParams = Mapping[str, Any]
HeaderSource = Callable[[], Mapping[str, Any]]


_portSuffixPattern = re.compile(r":(\d+)$")
_bracketedIPv6Pattern = re.compile(r"^\[[0-9a-fA-F:]+\]$")
_schemeAndHostPrefixPattern = re.compile(r"^[^/:]+://[^/]+")
_protocolPattern = re.compile(
    r"^(?:HTTP/)?(?P<version>[1-9]\d*(?:\.\d)?)\Z"
)


def getHeaderFromMapping(
    name: str, mapping: Mapping[str, Any], default: Any = None
) -> Any:
    """
    Find a header value in a mapping, ignoring case.

    @param name: The header name.

    @param mapping: A mapping of header names to values or lists of values.

    @param default: The value to return if there is no such header.

    @return: The header value; lists of values are joined with C{", "}.
    """
    lowered = name.lower()

    for key, value in mapping.items():
        if isinstance(key, str) and key.lower() == lowered:
            if isinstance(value, (list, tuple)):
                return ", ".join(value)
            return value

    return default


def canonicalHeaderName(variableName: str) -> str:
    """
    Convert the suffix of a server variable to a header name, eg. C{X_FOO_BAR}
    to C{X-Foo-Bar}.
    """
    return "-".join(part.capitalize() for part in variableName.split("_"))


def marshalHeaders(server: ServerParams) -> Dict[str, str]:
    """
    Collect request headers from server variables.

    C{HTTP_*} variables become headers named after the rest of the variable,
    and C{CONTENT_*} variables become C{Content-*} headers.
    C{REDIRECT_} prefixed variables are used when the same variable without
    the prefix is absent.
    Cookie variables and empty values are skipped.
    """
    headers: Dict[str, str] = {}

    for key, value in server.items():
        if not isinstance(key, str) or value is None or value == "":
            continue

        if key.startswith("REDIRECT_"):
            key = key[len("REDIRECT_") :]
            if key in server:
                continue

        if key.startswith("HTTP_COOKIE"):
            continue

        if key.startswith("HTTP_"):
            headers[canonicalHeaderName(key[len("HTTP_") :])] = value
        elif key.startswith("CONTENT_"):
            suffix = key[len("CONTENT_") :]
            if suffix == "MD5":
                headers["Content-MD5"] = value
            else:
                headers["Content-" + canonicalHeaderName(suffix)] = value

    return headers


def _portFromServer(server: ServerParams) -> Optional[int]:
    port = server.get("SERVER_PORT")
    if isinstance(port, int) and not isinstance(port, bool):
        return port
    if isinstance(port, str) and port.isascii() and port.isdigit():
        return int(port)
    return None


def marshalHostAndPort(
    headers: Mapping[str, Any], server: ServerParams
) -> Tuple[str, Optional[int]]:
    """
    Determine the request host and port.

    The C{Host} header is used if present, otherwise C{SERVER_NAME} and
    C{SERVER_PORT}.

    @return: The host (an empty string if unknown) and the port (C{None} if
        unknown).
    """
    host = getHeaderFromMapping("host", headers)
    if host:
        match = _portSuffixPattern.search(host)
        if match is None:
            return host, None
        return host[: match.start()], int(match.group(1))

    host = server.get("SERVER_NAME")
    if not host:
        return "", None

    port = _portFromServer(server)
    serverAddress = server.get("SERVER_ADDR")

    if serverAddress is None or _bracketedIPv6Pattern.match(host) is None:
        return host, port

    # Some browsers send an IPv6 host with the port inside the brackets.
    host = f"[{serverAddress}]"
    port = port or 80
    if f"{port}]" == host[host.rfind(":") + 1 :]:
        port = None

    log.debug(
        "Corrected IPv6 server name to host {host} and port {port}",
        host=host,
        port=port,
    )
    return host, port


def marshalRequestPath(server: ServerParams) -> str:
    """
    Determine the request path, which may still include a query and
    fragment.

    In order of preference: IIS's unencoded URL (if IIS rewrote the URL),
    C{X-Original-URL}, C{X-Rewrite-URL}, C{REQUEST_URI}, C{ORIG_PATH_INFO},
    and finally C{"/"}.
    Any scheme and host at the start of the URL are removed.
    """
    unencodedURL = server.get("UNENCODED_URL", "")
    if server.get("IIS_WasUrlRewritten") == "1" and unencodedURL:
        log.debug("Using IIS unencoded URL {url!r}", url=unencodedURL)
        return unencodedURL

    requestURI = server.get("REQUEST_URI")

    for override in ("HTTP_X_ORIGINAL_URL", "HTTP_X_REWRITE_URL"):
        overrideURI = server.get(override)
        if overrideURI:
            log.debug(
                "Using {variable} {url!r} as request URI",
                variable=override,
                url=overrideURI,
            )
            requestURI = overrideURI
            break

    if requestURI is not None:
        return _schemeAndHostPrefixPattern.sub("", requestURI)

    originalPathInfo = server.get("ORIG_PATH_INFO")
    if not originalPathInfo:
        return "/"

    return originalPathInfo


def isHTTPSOn(value: Any) -> bool:
    """
    Interpret the value of the C{HTTPS} server variable.
    """
    if isinstance(value, bool):
        return value
    if not value:
        return False
    return str(value).lower() != "off"


def marshalUri(server: ServerParams, headers: Mapping[str, Any]) -> Uri:
    """
    Derive the request URI from server variables and request headers.

    @raise tidings.InvalidURIComponentError: If a derived component is
        invalid, eg. an out of range port in the C{Host} header.
    """
    https = server.get("HTTPS", server.get("https"))
    forwardedProto = getHeaderFromMapping("x-forwarded-proto", headers, "")

    if isHTTPSOn(https) or forwardedProto.lower() == "https":
        scheme = "https"
    else:
        scheme = "http"

    uri = Uri().withScheme(scheme)

    host, port = marshalHostAndPort(headers, server)
    if host:
        uri = uri.withHost(host)
        if port:
            uri = uri.withPort(port)

    path = marshalRequestPath(server).split("?", 1)[0]
    path, _, fragment = path.partition("#")

    return (
        uri.withPath(path)
        .withFragment(fragment)
        .withQuery(server.get("QUERY_STRING", ""))
    )


def marshalMethod(server: ServerParams) -> str:
    return server.get("REQUEST_METHOD") or "GET"


def marshalProtocolVersion(server: ServerParams) -> str:
    """
    Determine the HTTP protocol version from C{SERVER_PROTOCOL}.

    @return: The version, eg. C{"1.1"}; C{"1.1"} if unknown.

    @raise UnexpectedPayloadError: If C{SERVER_PROTOCOL} is not an HTTP
        protocol.
    """
    protocol = server.get("SERVER_PROTOCOL")
    if not protocol:
        return "1.1"

    match = _protocolPattern.match(protocol)
    if match is None:
        raise UnexpectedPayloadError(
            f"Unrecognized protocol version {protocol!r}"
        )

    return match.group("version")


def normalizeServer(
    server: ServerParams, headerSource: Optional[HeaderSource] = None
) -> Dict[str, Any]:
    """
    Copy server variables, filling in C{HTTP_AUTHORIZATION} from
    C{headerSource} if it is missing.

    Some servers do not pass the C{Authorization} header to applications in
    server variables, but make it available by other means.

    @param headerSource: A callable returning a mapping of request header
        names to values.
    """
    server = dict(server)

    if headerSource is None or "HTTP_AUTHORIZATION" in server:
        return server

    authorization = getHeaderFromMapping("authorization", headerSource())
    if authorization is not None:
        server["HTTP_AUTHORIZATION"] = authorization

    return server


def parseCookieHeader(header: str) -> Dict[str, str]:
    """
    Parse a C{Cookie} header.
    If a cookie name is repeated, the last value wins.
    """
    return dict(parse_cookie(header).items(multi=True))
