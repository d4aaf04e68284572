# -*- test-case-name: tidings.test.test_headers -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
HTTP headers API.
"""

import re
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Tuple,
    Union,
)

from attr import Factory, attrib, attrs
from zope.interface import implementer

from twisted.logger import Logger

from ._imessage import (
    HeaderValues,
    IHTTPHeaders,
    InvalidHeaderNameError,
    InvalidHeaderValueError,
    RawHeaders,
)


__all__ = ()


log = Logger()

String = Union[bytes, str]

# Lower-cased name -> (name as first given, values)
Entries = Dict[str, Tuple[str, Tuple[str, ...]]]


# Encoding/decoding header data

HEADER_NAME_ENCODING = "iso-8859-1"
HEADER_VALUE_ENCODING = "iso-8859-1"


def headerNameAsBytes(name: String) -> bytes:
    """
    Convert a header name to bytes if necessary.
    """
    if isinstance(name, bytes):
        return name
    else:
        return name.encode(HEADER_NAME_ENCODING)


def headerNameAsText(name: String) -> str:
    """
    Convert a header name to str if necessary.
    """
    if isinstance(name, str):
        return name
    else:
        return name.decode(HEADER_NAME_ENCODING)


def headerValueAsBytes(value: String) -> bytes:
    """
    Convert a header value to bytes if necessary.
    """
    if isinstance(value, bytes):
        return value
    else:
        return value.encode(HEADER_VALUE_ENCODING)


def headerValueAsText(value: String) -> str:
    """
    Convert a header value to str if necessary.
    """
    if isinstance(value, str):
        return value
    else:
        return value.decode(HEADER_VALUE_ENCODING)


def normalizeHeaderName(name: str) -> str:
    """
    Normalize a header name.
    """
    return name.lower()


# Validation

_headerNamePattern = re.compile(r"[a-zA-Z0-9'`#$%&*+.^_|~!-]+")

# A LF not preceded by CR, a CR not followed by LF, or a CRLF not followed by
# a space or tab.
_badLineBreakPattern = re.compile(
    r"(?:(?<!\r)\n)|(?:\r(?!\n))|(?:\r\n(?![ \t]))"
)


def _isDisallowedCharacter(ordinal: int) -> bool:
    return (ordinal < 32 and ordinal != 9) or ordinal == 127 or ordinal > 254


def isValidValue(value: str) -> bool:
    """
    Determine whether a header value is safe to send.

    Line breaks are only allowed as a CRLF followed by a space or a tab
    (obsolete line folding), and every other character must be a tab or a
    printable ISO-8859-1 character other than DEL and C{\\xff}.

    @param value: The header value to check.

    @return: C{True} if the value is valid.
    """
    if _badLineBreakPattern.search(value) is not None:
        return False

    for character in value:
        if character in "\r\n":
            continue
        if _isDisallowedCharacter(ord(character)):
            return False

    return True


def filterValue(value: str) -> str:
    """
    Remove disallowed characters from a header value.

    Unlike L{isValidValue}, this never rejects a value: CRLF sequences that
    are followed by a space or tab are kept, and every other disallowed
    character is dropped.

    @param value: The header value to filter.

    @return: The filtered value.
    """
    kept: List[str] = []
    length = len(value)
    index = 0

    while index < length:
        character = value[index]
        ordinal = ord(character)

        if ordinal == 13:
            following = value[index + 1 : index + 3]
            if following in ("\n ", "\n\t"):
                kept.append("\r\n")
                index += 2
                continue
            index += 1
            continue

        if not _isDisallowedCharacter(ordinal):
            kept.append(character)

        index += 1

    filtered = "".join(kept)

    if len(filtered) != length:
        log.debug(
            "Dropped {count} disallowed characters from header value",
            count=length - len(filtered),
        )

    return filtered


def assertValidName(name: Any) -> None:
    """
    @raise InvalidHeaderNameError: If C{name} is not text, or not a valid HTTP
        token.
    """
    if not isinstance(name, str):
        raise InvalidHeaderNameError(
            f"header name must be str, not {type(name).__name__}"
        )

    if _headerNamePattern.fullmatch(name) is None:
        raise InvalidHeaderNameError(f"{name!r} is not a valid header name")


def assertValidValue(value: str) -> None:
    """
    @raise InvalidHeaderValueError: If L{isValidValue} rejects C{value}.
    """
    if not isValidValue(value):
        raise InvalidHeaderValueError(f"{value!r} is not a valid header value")


def normalizeHeaderValues(value: HeaderValues) -> Tuple[str, ...]:
    """
    Convert a header value, or a sequence of header values, to a tuple of
    validated text values.

    Numbers are converted to text; bytes are decoded as ISO-8859-1.

    @raise InvalidHeaderValueError: If the value is not of a supported type,
        is an empty sequence, or contains an invalid value.
    """
    if isinstance(value, (list, tuple)):
        if not value:
            raise InvalidHeaderValueError(
                "header values must not be an empty sequence"
            )
        values: Iterable[Any] = value
    else:
        values = (value,)

    normalized = []
    for item in values:
        if isinstance(item, bool) or not isinstance(
            item, (str, bytes, int, float)
        ):
            raise InvalidHeaderValueError(
                "header value must be str or a sequence of str, "
                f"not {type(item).__name__}"
            )
        if isinstance(item, (str, bytes)):
            text = headerValueAsText(item)
        else:
            text = str(item)
        assertValidValue(text)
        normalized.append(text)

    return tuple(normalized)


# Internal data representation


def headerEntries(headers: Any) -> Entries:
    """
    Convert a header mapping, an iterable of C{(name, value)} pairs or an
    existing headers object to header entries.
    """
    if isinstance(headers, (FrozenHTTPHeaders, MutableHTTPHeaders)):
        return dict(headers._entries)

    if isinstance(headers, Mapping):
        pairs: Iterable[Any] = headers.items()
    else:
        pairs = headers

    entries: Entries = {}

    for pair in pairs:
        try:
            name, value = pair
        except (TypeError, ValueError):
            raise ValueError("header pair must be a 2-item iterable")

        addEntry(entries, name, value)

    return entries


def validatedEntry(
    name: String, value: HeaderValues
) -> Tuple[str, Tuple[str, ...]]:
    name = headerNameAsText(name) if isinstance(name, bytes) else name
    assertValidName(name)
    return (name, normalizeHeaderValues(value))


def setEntry(entries: Entries, name: String, value: HeaderValues) -> None:
    """
    Replace the values for a header, moving it to the end of C{entries}.
    """
    name, values = validatedEntry(name, value)
    key = normalizeHeaderName(name)
    entries.pop(key, None)
    entries[key] = (name, values)


def addEntry(entries: Entries, name: String, value: HeaderValues) -> None:
    """
    Append values for a header, keeping the name it was first added with.
    """
    name, values = validatedEntry(name, value)
    key = normalizeHeaderName(name)
    existing = entries.get(key)
    if existing is None:
        entries[key] = (name, values)
    else:
        entries[key] = (existing[0], existing[1] + values)


def getValuesFromEntries(entries: Entries, name: String) -> List[str]:
    entry = entries.get(normalizeHeaderName(headerNameAsText(name)))
    if entry is None:
        return []
    return list(entry[1])


def rawHeadersFromEntries(entries: Entries) -> RawHeaders:
    return tuple(
        (headerNameAsBytes(name), headerValueAsBytes(value))
        for name, values in entries.values()
        for value in values
    )


# Implementation


@implementer(IHTTPHeaders)
@attrs(frozen=True, hash=False)
class FrozenHTTPHeaders:
    """
    Immutable HTTP entity headers.

    Header names are matched case-insensitively.
    Derived copies are made with L{withValues}, L{withAddedValues} and
    L{without}; unchanged value tuples are shared between copies.
    """

    _entries: Entries = attrib(converter=headerEntries, default=())

    @property
    def rawHeaders(self) -> RawHeaders:
        return rawHeadersFromEntries(self._entries)

    def getValues(self, name: String) -> List[str]:
        return getValuesFromEntries(self._entries, name)

    def getLine(self, name: String) -> str:
        return ",".join(self.getValues(name))

    def has(self, name: String) -> bool:
        return normalizeHeaderName(headerNameAsText(name)) in self._entries

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for name, values in self._entries.values():
            yield (name, list(values))

    def asDict(self) -> Dict[str, List[str]]:
        """
        @return: A L{dict} mapping header names, in their original casing, to
            lists of values.
        """
        return dict(self.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def mutableCopy(self) -> "MutableHTTPHeaders":
        return MutableHTTPHeaders(self)

    def withValues(
        self, name: String, value: HeaderValues
    ) -> "FrozenHTTPHeaders":
        """
        @return: A copy of these headers with all values for C{name} replaced
            by C{value}.
        """
        builder = self.mutableCopy()
        builder.setValues(name, value)
        return builder.freeze()

    def withAddedValues(
        self, name: String, value: HeaderValues
    ) -> "FrozenHTTPHeaders":
        """
        @return: A copy of these headers with C{value} appended to the values
            for C{name}.
        """
        builder = self.mutableCopy()
        builder.addValues(name, value)
        return builder.freeze()

    def without(self, name: String) -> "FrozenHTTPHeaders":
        """
        @return: A copy of these headers without C{name}.
        """
        if not self.has(name):
            return self
        builder = self.mutableCopy()
        builder.remove(name)
        return builder.freeze()


@attrs(frozen=True)
class MutableHTTPHeaders:
    """
    Mutable HTTP entity headers, for building a L{FrozenHTTPHeaders}.

    Every mutation validates its input completely before changing anything.
    """

    _entries: Entries = attrib(converter=headerEntries, default=Factory(dict))

    @property
    def rawHeaders(self) -> RawHeaders:
        return rawHeadersFromEntries(self._entries)

    def getValues(self, name: String) -> List[str]:
        return getValuesFromEntries(self._entries, name)

    def has(self, name: String) -> bool:
        return normalizeHeaderName(headerNameAsText(name)) in self._entries

    def setValues(self, name: String, value: HeaderValues) -> None:
        setEntry(self._entries, name, value)

    def addValues(self, name: String, value: HeaderValues) -> None:
        addEntry(self._entries, name, value)

    def remove(self, name: String) -> None:
        self._entries.pop(normalizeHeaderName(headerNameAsText(name)), None)

    def freeze(self) -> FrozenHTTPHeaders:
        return FrozenHTTPHeaders(self)
