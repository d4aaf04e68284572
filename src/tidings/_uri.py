# -*- test-case-name: tidings.test.test_uri -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
URI value objects.
"""

import re
from typing import Any, ClassVar, List, Mapping, Optional, Tuple, Union

from attr import Attribute, attrib, attrs, evolve
from attr.validators import instance_of
from hyperlink import URL, DecodedURL

from ._imessage import (
    InvalidPathError,
    InvalidPortError,
    InvalidQueryError,
    InvalidURIComponentError,
    InvalidURIError,
    UnsupportedSchemeError,
)


__all__ = ()


_uriPattern = re.compile(
    r"^(?:(?P<scheme>[^:/?#]+):)?"
    r"(?://(?P<authority>[^/?#]*))?"
    r"(?P<path>[^?#]*)"
    r"(?:\?(?P<query>[^#]*))?"
    r"(?:#(?P<fragment>.*))?$",
    re.DOTALL,
)

# "host:port", optionally followed by a path, query or fragment.
_hostAndPortPattern = re.compile(r"^[^:/?#\[\]@]+:\d+(?=[/?#]|$)")

_schemeSuffixPattern = re.compile(r":(//)?$")


def _isDigits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def normalizeScheme(scheme: Any) -> str:
    """
    Lower-case a scheme and strip any trailing C{":"} or C{"://"}.
    """
    if not isinstance(scheme, str):
        raise UnsupportedSchemeError(
            f"scheme must be str, not {type(scheme).__name__}"
        )
    return _schemeSuffixPattern.sub("", scheme.lower())


def normalizePort(port: Any) -> Optional[int]:
    """
    Convert a port to an L{int}.

    @raise InvalidPortError: If C{port} is not C{None}, an integer or a
        string of digits, or is outside of the range 1-65535.
    """
    if port is None:
        return None

    if isinstance(port, str) and _isDigits(port):
        port = int(port)
    elif isinstance(port, bool) or not isinstance(port, int):
        raise InvalidPortError(
            f"Invalid port {port!r}; must be an integer or a string of digits"
        )

    if not 1 <= port <= 65535:
        raise InvalidPortError(
            f"Invalid port {port!r}; must be a valid TCP/UDP port"
        )

    return port


def normalizePath(path: Any) -> str:
    """
    Prefix a path with C{"/"} if it is not empty and has none.

    @raise InvalidPathError: If C{path} is not text, or contains C{"?"} or
        C{"#"}.
    """
    if not isinstance(path, str):
        raise InvalidPathError(
            f"Invalid path; must be str, not {type(path).__name__}"
        )
    if "?" in path:
        raise InvalidPathError(
            "Invalid path; must not contain a query string"
        )
    if "#" in path:
        raise InvalidPathError("Invalid path; must not contain a URI fragment")

    if path and path != "*" and not path.startswith("/"):
        path = "/" + path

    return path


def normalizeQuery(query: Any) -> str:
    """
    Strip a leading C{"?"} from a query.

    Any text without C{"#"} is a valid query: each C{"&"}-separated part is a
    key, optionally followed by C{"="} and a value.

    @raise InvalidQueryError: If C{query} is not text, or contains C{"#"}.
    """
    if not isinstance(query, str):
        raise InvalidQueryError(
            f"Query string must be str, not {type(query).__name__}"
        )
    if "#" in query:
        raise InvalidQueryError("Query string must not include a URI fragment")

    if query.startswith("?"):
        query = query[1:]

    return query


def normalizeFragment(fragment: Any) -> str:
    """
    Strip a leading C{"#"} from a fragment.
    """
    if not isinstance(fragment, str):
        raise InvalidURIComponentError(
            f"Fragment must be str, not {type(fragment).__name__}"
        )

    if fragment.startswith("#"):
        fragment = fragment[1:]

    return fragment


def splitAuthority(authority: str) -> Tuple[str, str, Optional[int]]:
    """
    Split an authority into user information, host and port.

    @raise InvalidURIError: If the authority is malformed.
    """
    userInfo, at, hostAndPort = authority.rpartition("@")

    if hostAndPort.startswith("["):
        end = hostAndPort.find("]")
        if end < 0:
            raise InvalidURIError(
                f"Unterminated IPv6 address in authority {authority!r}"
            )
        host, rest = hostAndPort[: end + 1], hostAndPort[end + 1 :]
    else:
        host, colon, portText = hostAndPort.partition(":")
        rest = colon + portText

    port: Optional[int] = None
    if rest:
        portText = rest[1:]
        if not rest.startswith(":") or (portText and not _isDigits(portText)):
            raise InvalidURIError(f"Invalid port in authority {authority!r}")
        if portText:
            port = int(portText)

    return userInfo, host, port


@attrs(frozen=True)
class Uri:
    """
    An immutable URI.

    Each component is validated when set, and every C{with*} method returns a
    new L{Uri}, leaving the original unchanged.

    @cvar allowedSchemes: Supported schemes, mapped to their default ports.
        Subclasses may support more schemes by overriding this.
    """

    allowedSchemes: ClassVar[Mapping[str, int]] = {"http": 80, "https": 443}

    scheme: str = attrib(default="", converter=normalizeScheme)
    userInfo: str = attrib(default="", validator=instance_of(str))
    host: str = attrib(default="", validator=instance_of(str))
    port: Optional[int] = attrib(default=None, converter=normalizePort)
    path: str = attrib(default="", converter=normalizePath)
    query: str = attrib(default="", converter=normalizeQuery)
    fragment: str = attrib(default="", converter=normalizeFragment)

    @scheme.validator
    def _checkScheme(self, attribute: Attribute, scheme: str) -> None:
        if scheme and scheme not in self.allowedSchemes:
            raise UnsupportedSchemeError(
                f"Unsupported scheme {scheme!r}; must be an empty string or "
                f"in the set ({', '.join(sorted(self.allowedSchemes))})"
            )

    @classmethod
    def fromText(cls, text: str) -> "Uri":
        """
        Parse a URI.

        Components absent from C{text} are empty, or C{None} for the port.

        @raise TypeError: If C{text} is not a L{str}.
        @raise InvalidURIError: If C{text} is malformed.
        @raise InvalidURIComponentError: If a component is invalid.
        """
        if not isinstance(text, str):
            raise TypeError(f"URI must be str, not {type(text).__name__}")

        if _hostAndPortPattern.match(text) is not None:
            text = "//" + text

        match = _uriPattern.match(text)
        if match is None:
            raise InvalidURIError(f"Malformed URI {text!r}")

        scheme = match.group("scheme") or ""
        authority = match.group("authority")

        userInfo, host, port = "", "", None
        if authority is not None:
            userInfo, host, port = splitAuthority(authority)
            if not host and normalizeScheme(scheme) != "file":
                raise InvalidURIError(
                    f"The URI {text!r} appears to be malformed: empty host"
                )

        return cls(
            scheme=scheme,
            userInfo=userInfo,
            host=host,
            port=port,
            path=match.group("path"),
            query=match.group("query") or "",
            fragment=match.group("fragment") or "",
        )

    @classmethod
    def fromURL(cls, url: Union[URL, DecodedURL]) -> "Uri":
        """
        Convert a L{hyperlink} URL.
        """
        return cls.fromText(url.to_uri().to_text())

    def asURL(self) -> DecodedURL:
        """
        @return: This URI as a L{hyperlink.DecodedURL}.
        """
        return DecodedURL.from_text(str(self), lazy=True)

    def queryParameters(self) -> List[Tuple[str, Optional[str]]]:
        """
        @return: The decoded C{(name, value)} pairs of the query, in order.
            The value is C{None} for names with no C{"="}.  Pairs whose
            percent-encoded bytes are not UTF-8 are left encoded.
        """
        if not self.query:
            return []

        pairs: List[Tuple[str, Optional[str]]] = []
        for pair in URL.from_text("?" + self.query).query:
            try:
                pairs.extend(DecodedURL(URL(query=(pair,))).query)
            except UnicodeDecodeError:
                pairs.append(pair)
        return pairs

    def hasNonStandardPort(self) -> bool:
        """
        @return: C{True} if the port should be shown in the authority.
            Any port is non-standard when there is no scheme.
        """
        if self.port is None:
            return False
        if not self.scheme:
            return True
        return self.port != self.allowedSchemes.get(self.scheme)

    @property
    def authority(self) -> str:
        """
        C{[userInfo@]host[:port]}, or an empty string if there is no host.
        """
        if not self.host:
            return ""

        authority = self.host
        if self.userInfo:
            authority = f"{self.userInfo}@{authority}"
        if self.hasNonStandardPort():
            authority = f"{authority}:{self.port}"

        return authority

    def withScheme(self, scheme: str) -> "Uri":
        return evolve(self, scheme=scheme)

    def withUserInfo(self, user: str, password: Optional[str] = None) -> "Uri":
        if not isinstance(user, str):
            raise TypeError(f"user must be str, not {type(user).__name__}")
        if password:
            if not isinstance(password, str):
                raise TypeError(
                    f"password must be str, not {type(password).__name__}"
                )
            user = f"{user}:{password}"
        return evolve(self, userInfo=user)

    def withHost(self, host: str) -> "Uri":
        return evolve(self, host=host)

    def withPort(self, port: Union[int, str, None]) -> "Uri":
        return evolve(self, port=port)

    def withPath(self, path: str) -> "Uri":
        return evolve(self, path=path)

    def withQuery(self, query: str) -> "Uri":
        return evolve(self, query=query)

    def withFragment(self, fragment: str) -> "Uri":
        return evolve(self, fragment=fragment)

    def isOrigin(self) -> bool:
        """
        @return: C{True} if this URI is in origin form: a path and query only.
        """
        return not self.scheme and not self.authority and not self.fragment

    def isAbsolute(self) -> bool:
        """
        @return: C{True} if this URI has a scheme and an authority.
        """
        return bool(self.scheme and self.authority)

    def isAuthority(self) -> bool:
        """
        @return: C{True} if this URI is in authority form: an authority only.
        """
        return bool(
            self.authority
            and not self.scheme
            and not self.path
            and not self.query
            and not self.fragment
        )

    def isAsterisk(self) -> bool:
        """
        @return: C{True} if this URI is in asterisk form: a C{"*"} path only.
        """
        return (
            self.path == "*"
            and not self.scheme
            and not self.host
            and not self.userInfo
            and self.port is None
            and not self.query
            and not self.fragment
        )

    def __str__(self) -> str:
        if self.isAsterisk():
            return "*"

        authority = self.authority
        if self.isAuthority():
            return authority

        parts = []
        if self.scheme:
            parts.append(f"{self.scheme}:")

        if self.scheme == "file":
            parts.append("//")
        elif authority:
            parts.append(f"//{authority}")

        path = self.path
        if path:
            if not path.startswith("/"):
                path = "/" + path
            elif not authority and path.startswith("//"):
                path = "/" + path.lstrip("/")
            parts.append(path)

        if self.query:
            parts.append(f"?{self.query}")
        if self.fragment:
            parts.append(f"#{self.fragment}")

        return "".join(parts)


def uriFromArgument(uri: Any) -> Uri:
    """
    Convert a URI argument given to a request to a L{Uri}.

    @param uri: A L{Uri}, URI text, a L{hyperlink} URL, or C{None} for an
        empty URI.

    @raise TypeError: If C{uri} is of any other type.
    """
    if uri is None:
        return Uri()
    if isinstance(uri, Uri):
        return uri
    if isinstance(uri, str):
        return Uri.fromText(uri)
    if isinstance(uri, (URL, DecodedURL)):
        return Uri.fromURL(uri)
    raise TypeError(
        "URI must be a Uri, str or hyperlink URL, "
        f"not {type(uri).__name__}"
    )
