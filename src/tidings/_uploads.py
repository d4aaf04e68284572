# -*- test-case-name: tidings.test.test_uploads -*-
# Copyright (c) 2011-2021. See LICENSE for details.

"""
Uploaded files.
"""

from typing import Any, Dict, List, Mapping, Optional, Union, cast

from constantly import ValueConstant, Values
from zope.interface import implementer

from twisted.logger import Logger
from twisted.python.filepath import FilePath

from ._imessage import (
    IByteStream,
    IUploadedFile,
    InvalidUploadedFileError,
    UploadedFileError,
)
from ._stream import Stream


__all__ = ()


log = Logger()


class UploadError(Values):
    """
    Upload status codes, as reported by CGI-style servers.
    """

    OK = ValueConstant(0)
    INI_SIZE = ValueConstant(1)
    FORM_SIZE = ValueConstant(2)
    PARTIAL = ValueConstant(3)
    NO_FILE = ValueConstant(4)
    NO_TMP_DIR = ValueConstant(6)
    CANT_WRITE = ValueConstant(7)
    EXTENSION = ValueConstant(8)


def normalizeUploadError(error: Any) -> int:
    """
    @raise InvalidUploadedFileError: If C{error} is not an integer status
        between 0 and 8.
    """
    if isinstance(error, ValueConstant):
        error = error.value
    if isinstance(error, str) and error.isascii() and error.isdigit():
        error = int(error)
    if isinstance(error, bool) or not isinstance(error, int):
        raise InvalidUploadedFileError(
            f"Invalid error status {error!r} for UploadedFile; "
            "must be an integer"
        )
    if not 0 <= error <= 8:
        raise InvalidUploadedFileError(
            f"Invalid error status {error!r} for UploadedFile; must be an "
            "UPLOAD_ERR_* constant"
        )
    return error


@implementer(IUploadedFile)
class UploadedFile:
    """
    A file uploaded as part of a request.

    The file may be moved once; afterwards neither L{getStream} nor
    L{moveTo} may be used.
    """

    def __init__(
        self,
        source: Union[str, FilePath, IByteStream, None],
        size: Optional[int],
        error: Union[int, ValueConstant],
        clientFilename: Optional[str] = None,
        clientMediaType: Optional[str] = None,
    ) -> None:
        """
        @param source: The uploaded file, as a path or a stream.
            Only required if C{error} is L{UploadError.OK}.

        @param size: The size of the file in bytes.

        @param error: The upload status.
        """
        self.error = normalizeUploadError(error)
        self.size = size
        self.clientFilename = clientFilename
        self.clientMediaType = clientMediaType

        self._path: Optional[FilePath] = None
        self._stream: Optional[IByteStream] = None
        self._moved = False

        if self.error != UploadError.OK.value:
            return

        if isinstance(source, str):
            self._path = FilePath(source)
        elif isinstance(source, FilePath):
            self._path = source
        elif IByteStream.providedBy(source):
            self._stream = source
        else:
            raise InvalidUploadedFileError(
                "Invalid stream or file provided for UploadedFile"
            )

    def _assertUsable(self) -> None:
        if self.error != UploadError.OK.value:
            raise UploadedFileError(
                f"Cannot retrieve stream due to upload error {self.error}"
            )
        if self._moved:
            raise UploadedFileError(
                "Cannot retrieve stream after it has already been moved"
            )

    def getStream(self) -> IByteStream:
        self._assertUsable()
        if self._stream is not None:
            return self._stream
        return Stream(cast(FilePath, self._path), "rb")

    def moveTo(self, targetPath: Union[str, FilePath]) -> None:
        """
        Move the file to C{targetPath}.

        Files given by path are moved; files given as streams are copied to
        C{targetPath}.

        @raise UploadedFileError: If the upload failed, or the file has been
            moved already.
        @raise InvalidUploadedFileError: If C{targetPath} is empty.
        """
        if self._moved:
            raise UploadedFileError("Cannot move file; already moved!")
        self._assertUsable()

        if isinstance(targetPath, str):
            if not targetPath:
                raise InvalidUploadedFileError(
                    "Invalid path provided for move operation; "
                    "must be a non-empty string"
                )
            targetPath = FilePath(targetPath)

        if self._path is not None:
            self._path.moveTo(targetPath)
        else:
            stream = cast(IByteStream, self._stream)
            with targetPath.open("w") as target:
                target.write(bytes(stream))

        self._moved = True
        log.info(
            "Moved uploaded file {filename!r} to {path}",
            filename=self.clientFilename,
            path=targetPath.path,
        )


def uploadedFileFromSpecification(
    specification: Mapping[str, Any]
) -> UploadedFile:
    """
    Create an L{UploadedFile} from a C{{tmp_name, size, error, name, type}}
    descriptor.
    """
    return UploadedFile(
        specification["tmp_name"],
        specification.get("size"),
        specification.get("error", UploadError.OK.value),
        specification.get("name"),
        specification.get("type"),
    )


def normalizeNestedFileSpecification(
    specification: Mapping[str, Any]
) -> Union[List[Any], Dict[Any, Any]]:
    """
    Normalize a descriptor whose C{tmp_name} is itself a list or mapping, with
    C{size}, C{error}, C{name} and C{type} nested in the same shape.
    """
    tmpNames = specification["tmp_name"]

    def branch(key: str, index: Any) -> Any:
        values = specification.get(key)
        if values is None:
            return None
        return values[index]

    def normalizeAt(index: Any) -> Any:
        nested = {
            "tmp_name": tmpNames[index],
            "size": branch("size", index),
            "error": branch("error", index),
            "name": branch("name", index),
            "type": branch("type", index),
        }
        if isinstance(nested["tmp_name"], (Mapping, list, tuple)):
            return normalizeNestedFileSpecification(nested)
        if nested["error"] is None:
            nested["error"] = UploadError.OK.value
        return uploadedFileFromSpecification(nested)

    if isinstance(tmpNames, Mapping):
        return {key: normalizeAt(key) for key in tmpNames}
    return [normalizeAt(index) for index in range(len(tmpNames))]


def normalizeUploadedFileValue(value: Any) -> Any:
    if IUploadedFile.providedBy(value):
        return value
    if isinstance(value, Mapping) and "tmp_name" in value:
        if isinstance(value["tmp_name"], (Mapping, list, tuple)):
            return normalizeNestedFileSpecification(value)
        return uploadedFileFromSpecification(value)
    if isinstance(value, Mapping):
        return normalizeUploadedFiles(value)
    if isinstance(value, (list, tuple)):
        return [normalizeUploadedFileValue(item) for item in value]
    raise InvalidUploadedFileError(
        f"Invalid value {value!r} in files specification"
    )


def normalizeUploadedFiles(files: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Normalize uploaded file descriptors into a tree of L{IUploadedFile}
    providers.

    Values that already provide L{IUploadedFile} are kept; C{{tmp_name,
    size, error, name, type}} descriptors become L{UploadedFile}s (or lists
    or mappings of them, if C{tmp_name} is a list or mapping); other mappings
    and lists are normalized recursively.

    @raise InvalidUploadedFileError: For any other value.
    """
    return {
        key: normalizeUploadedFileValue(value) for key, value in files.items()
    }
