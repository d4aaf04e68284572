# -*- test-case-name: tidings.test.test_stream -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Byte streams for HTTP message bodies.

Streams carry a cursor and are the only mutable objects in L{tidings}; a
stream must not be used by more than one caller at a time.
"""

import os
import stat
from io import BytesIO
from os import SEEK_END, SEEK_SET
from tempfile import TemporaryFile
from typing import IO, Any, Callable, Dict, Optional, Tuple, Union

from constantly import NamedConstant, Names
from zope.interface import implementer

from twisted.logger import Logger
from twisted.python.filepath import FilePath

from ._imessage import IByteStream


__all__ = ()


log = Logger()

MEMORY = "memory:"
TEMP = "temp:"

StreamSource = Union[str, FilePath, IO[bytes]]


class StreamUnusableError(RuntimeError):
    """
    A stream operation was attempted on a closed or detached stream, or is not
    supported by the stream.
    """


class InvalidPointerPositionError(RuntimeError):
    """
    A relative stream was accessed while the underlying stream's position was
    before the start of its window.
    """


class StreamState(Names):
    """
    Life cycle states of a stream.
    """

    OPEN = NamedConstant()
    DETACHED = NamedConstant()
    CLOSED = NamedConstant()


def modeIsReadable(mode: str) -> bool:
    return "r" in mode or "+" in mode


def modeIsWritable(mode: str) -> bool:
    return any(flag in mode for flag in "xwca+")


def openPath(path: str, mode: str) -> IO[bytes]:
    """
    Open a file using a C{fopen}-style mode.

    Mode C{"c"} opens for writing, creating the file if needed, without
    truncating it.
    """
    flags = mode.replace("b", "").replace("t", "")
    update = "+" in flags
    letter = flags.replace("+", "")

    if letter == "c":
        descriptor = os.open(
            path, os.O_CREAT | (os.O_RDWR if update else os.O_WRONLY)
        )
        return os.fdopen(descriptor, "r+b" if update else "wb")

    if letter not in ("r", "w", "a", "x"):
        raise ValueError(f"Invalid mode {mode!r} for stream")

    return open(path, letter + "b" + ("+" if update else ""))


def openSource(source: StreamSource, mode: str) -> Tuple[Any, str]:
    """
    Open a stream source.

    @return: The opened resource and the mode describing it.
    """
    if isinstance(source, str):
        if source == MEMORY:
            return BytesIO(), mode
        if source == TEMP:
            return TemporaryFile("w+b"), mode
        return openPath(source, mode), mode

    if isinstance(source, FilePath):
        return openPath(source.path, mode), mode

    if hasattr(source, "read") or hasattr(source, "write"):
        resourceMode = getattr(source, "mode", None)
        if isinstance(resourceMode, str):
            return source, resourceMode
        return source, modeFromResource(source)

    raise TypeError(
        "stream source must be a path, a stream identifier or a binary file "
        f"object, not {type(source).__name__}"
    )


def modeFromResource(resource: Any) -> str:
    readable = getattr(resource, "readable", lambda: hasattr(resource, "read"))
    writable = getattr(
        resource, "writable", lambda: hasattr(resource, "write")
    )
    if readable() and writable():
        return "r+b"
    if writable():
        return "wb"
    return "rb"


@implementer(IByteStream)
class Stream:
    """
    A stream over a file, an in-memory buffer or an open binary file object.

    @ivar state: The life cycle state of this stream.
    @type state: L{StreamState}
    """

    def __init__(self, source: StreamSource, mode: str = "r") -> None:
        """
        @param source: A path, a L{FilePath}, L{MEMORY}, L{TEMP}, or a binary
            file object.

        @param mode: An C{fopen}-style mode, used when C{source} has to be
            opened.
        """
        self.state = StreamState.CLOSED
        self._resource: Any = None
        self._mode = ""
        self._reachedEnd = False
        self.attach(source, mode)

    def attach(self, source: StreamSource, mode: str = "r") -> None:
        """
        Bind this stream to a new source, replacing any current one.
        """
        resource, resourceMode = openSource(source, mode)
        self._resource = resource
        self._mode = resourceMode
        self._reachedEnd = False
        self.state = StreamState.OPEN

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _usableResource(self, operation: str) -> Any:
        if self.state is not StreamState.OPEN:
            raise StreamUnusableError(
                f"No resource available; cannot {operation}"
            )
        return self._resource

    def isReadable(self) -> bool:
        if self.state is not StreamState.OPEN:
            return False
        return modeIsReadable(self._mode)

    def isWritable(self) -> bool:
        if self.state is not StreamState.OPEN:
            return False
        return modeIsWritable(self._mode)

    def isSeekable(self) -> bool:
        if self.state is not StreamState.OPEN:
            return False
        seekable = getattr(self._resource, "seekable", None)
        return bool(seekable is not None and seekable())

    def read(self, length: int = -1) -> bytes:
        resource = self._usableResource("read")
        if not self.isReadable():
            raise StreamUnusableError("Stream is not readable")

        data = resource.read(length)
        if data is None:
            data = b""
        if length < 0 or len(data) < length:
            self._reachedEnd = True
        return data

    def write(self, data: bytes) -> int:
        resource = self._usableResource("write")
        if not self.isWritable():
            raise StreamUnusableError("Stream is not writable")

        written = resource.write(data)
        return len(data) if written is None else written

    def seek(self, offset: int, whence: int = SEEK_SET) -> None:
        resource = self._usableResource("seek")
        if not self.isSeekable():
            raise StreamUnusableError("Stream is not seekable")

        try:
            resource.seek(offset, whence)
        except (OSError, ValueError) as e:
            raise StreamUnusableError("Error seeking within stream") from e
        self._reachedEnd = False

    def rewind(self) -> None:
        self.seek(0)

    def tell(self) -> int:
        resource = self._usableResource("tell position")
        try:
            return int(resource.tell())
        except (OSError, ValueError) as e:
            raise StreamUnusableError(
                "Error occurred during tell operation"
            ) from e

    def eof(self) -> bool:
        if self.state is not StreamState.OPEN:
            return True
        if self.isSeekable():
            size = self.getSize()
            if size is not None:
                return self._resource.tell() >= size
        return self._reachedEnd

    def getSize(self) -> Optional[int]:
        if self.state is not StreamState.OPEN:
            return None

        resource = self._resource
        if isinstance(resource, BytesIO):
            return resource.getbuffer().nbytes

        try:
            descriptor = resource.fileno()
        except (AttributeError, OSError, ValueError):
            descriptor = None

        if descriptor is not None:
            flush = getattr(resource, "flush", None)
            if flush is not None and self.isWritable():
                flush()
            status = os.fstat(descriptor)
            if stat.S_ISREG(status.st_mode):
                return status.st_size

        if self.isSeekable():
            position = resource.tell()
            size = resource.seek(0, SEEK_END)
            resource.seek(position, SEEK_SET)
            return int(size)

        return None

    def getContents(self) -> bytes:
        resource = self._usableResource("read")
        if not self.isReadable():
            raise StreamUnusableError("Stream is not readable")

        data = resource.read()
        self._reachedEnd = True
        return b"" if data is None else data

    def getMetadata(self, key: Optional[str] = None) -> Any:
        if self.state is not StreamState.OPEN:
            metadata: Dict[str, Any] = {}
        else:
            metadata = {
                "mode": self._mode,
                "seekable": self.isSeekable(),
                "uri": getattr(self._resource, "name", None),
                "stream_type": type(self._resource).__name__,
            }

        if key is None:
            return metadata
        return metadata.get(key)

    def close(self) -> None:
        if self.state is not StreamState.OPEN:
            return
        resource = self._resource
        self._resource = None
        self.state = StreamState.CLOSED
        resource.close()
        log.debug("Closed stream resource {resource!r}", resource=resource)

    def detach(self) -> Any:
        if self.state is not StreamState.OPEN:
            return None
        resource = self._resource
        self._resource = None
        self.state = StreamState.DETACHED
        log.debug("Detached stream resource {resource!r}", resource=resource)
        return resource

    def __bytes__(self) -> bytes:
        if not self.isReadable():
            return b""
        if self.isSeekable():
            self.rewind()
        return self.getContents()


@implementer(IByteStream)
class InputStream:
    """
    A read-once, forward-only stream for inbound request bodies.

    Everything read is cached, so that L{bytes} and, once the end has been
    reached, L{getContents} always return the complete body.
    """

    def __init__(self, source: Optional[StreamSource] = None) -> None:
        if source is None:
            source = BytesIO()
        self._stream = Stream(source, "rb")
        self._cache = b""
        self._reachedEnd = False

    def isReadable(self) -> bool:
        return self._stream.isReadable()

    def isWritable(self) -> bool:
        return False

    def isSeekable(self) -> bool:
        return False

    def read(self, length: int = -1) -> bytes:
        data = self._stream.read(length)
        self._cache += data
        if length < 0 or len(data) < length:
            self._reachedEnd = True
        return data

    def write(self, data: bytes) -> int:
        raise StreamUnusableError("Input streams are not writable")

    def seek(self, offset: int, whence: int = SEEK_SET) -> None:
        raise StreamUnusableError("Input streams are not seekable")

    def rewind(self) -> None:
        raise StreamUnusableError("Input streams are not seekable")

    def tell(self) -> int:
        if self._stream.state is not StreamState.OPEN:
            raise StreamUnusableError(
                "No resource available; cannot tell position"
            )
        return len(self._cache)

    def eof(self) -> bool:
        return self._reachedEnd or self._stream.eof()

    def getSize(self) -> Optional[int]:
        if self._reachedEnd:
            return len(self._cache)
        return None

    def getContents(self) -> bytes:
        if self._reachedEnd:
            return self._cache
        data = self._stream.getContents()
        self._cache += data
        self._reachedEnd = True
        return data

    def getMetadata(self, key: Optional[str] = None) -> Any:
        return self._stream.getMetadata(key)

    def close(self) -> None:
        self._stream.close()

    def detach(self) -> Any:
        return self._stream.detach()

    def __bytes__(self) -> bytes:
        if not self._reachedEnd:
            if not self.isReadable():
                return self._cache
            self.getContents()
        return self._cache


@implementer(IByteStream)
class CallbackStream:
    """
    A stream whose contents are produced by calling a function once.

    Only L{getContents} and L{bytes} are supported; every other I/O operation
    raises L{StreamUnusableError}.
    """

    def __init__(self, callback: Callable[[], bytes]) -> None:
        self.attach(callback)

    def attach(self, callback: Callable[[], bytes]) -> None:
        if not callable(callback):
            raise TypeError(
                f"callback must be callable, not {type(callback).__name__}"
            )
        self._callback: Optional[Callable[[], bytes]] = callback

    def isReadable(self) -> bool:
        return False

    def isWritable(self) -> bool:
        return False

    def isSeekable(self) -> bool:
        return False

    def read(self, length: int = -1) -> bytes:
        raise StreamUnusableError("Callback streams cannot read")

    def write(self, data: bytes) -> int:
        raise StreamUnusableError("Callback streams cannot write")

    def seek(self, offset: int, whence: int = SEEK_SET) -> None:
        raise StreamUnusableError("Callback streams cannot seek position")

    def rewind(self) -> None:
        raise StreamUnusableError("Callback streams cannot rewind position")

    def tell(self) -> int:
        raise StreamUnusableError("Callback streams cannot tell position")

    def eof(self) -> bool:
        return self._callback is None

    def getSize(self) -> Optional[int]:
        return None

    def getContents(self) -> bytes:
        callback = self.detach()
        if callback is None:
            return b""
        return callback()

    def getMetadata(self, key: Optional[str] = None) -> Any:
        metadata = {
            "eof": self.eof(),
            "stream_type": "callback",
            "seekable": False,
        }
        if key is None:
            return metadata
        return metadata.get(key)

    def close(self) -> None:
        self._callback = None

    def detach(self) -> Optional[Callable[[], bytes]]:
        callback = self._callback
        self._callback = None
        return callback

    def __bytes__(self) -> bytes:
        return self.getContents()


@implementer(IByteStream)
class RelativeStream:
    """
    A view of another stream starting at a fixed offset.

    Positions are reported and set relative to the offset; reads and writes
    happen at the underlying stream's position, which must not be before the
    offset.
    """

    def __init__(self, decorated: IByteStream, offset: int) -> None:
        if not IByteStream.providedBy(decorated):
            raise TypeError(
                f"{decorated!r} does not provide {IByteStream.__name__}"
            )
        self._decorated = decorated
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    def _assertInWindow(self) -> None:
        if self._decorated.tell() < self._offset:
            raise InvalidPointerPositionError(
                "Invalid pointer position: underlying stream is at "
                f"{self._decorated.tell()}, before offset {self._offset}"
            )

    def isReadable(self) -> bool:
        return self._decorated.isReadable()

    def isWritable(self) -> bool:
        return self._decorated.isWritable()

    def isSeekable(self) -> bool:
        return self._decorated.isSeekable()

    def read(self, length: int = -1) -> bytes:
        self._assertInWindow()
        return self._decorated.read(length)

    def write(self, data: bytes) -> int:
        self._assertInWindow()
        return self._decorated.write(data)

    def seek(self, offset: int, whence: int = SEEK_SET) -> None:
        if whence == SEEK_SET:
            self._decorated.seek(offset + self._offset, SEEK_SET)
        else:
            self._decorated.seek(offset, whence)

    def rewind(self) -> None:
        self.seek(0)

    def tell(self) -> int:
        return self._decorated.tell() - self._offset

    def eof(self) -> bool:
        return self._decorated.eof()

    def getSize(self) -> Optional[int]:
        size = self._decorated.getSize()
        if size is None:
            return None
        return size - self._offset

    def getContents(self) -> bytes:
        self._assertInWindow()
        return self._decorated.getContents()

    def getMetadata(self, key: Optional[str] = None) -> Any:
        return self._decorated.getMetadata(key)

    def close(self) -> None:
        self._decorated.close()

    def detach(self) -> Any:
        return self._decorated.detach()

    def __bytes__(self) -> bytes:
        if self.isSeekable():
            self.seek(0)
        return self.getContents()


def memoryStream(data: bytes = b"") -> Stream:
    """
    @return: A readable, writable and seekable in-memory L{Stream} holding
        C{data}, positioned at its start.
    """
    stream = Stream(MEMORY, "wb+")
    if data:
        stream.write(data)
        stream.rewind()
    return stream

