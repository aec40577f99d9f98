# errors.py -- errors for gitbin
# Copyright (C) 2026 The gitbin Authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitbin is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""gitbin-related exception classes.

Every decoder either returns a complete value or raises exactly one of the
exceptions below. I/O errors (``FileNotFoundError`` and friends) are never
wrapped; they reach the caller unchanged.
"""

__all__ = [
    "FileFormatException",
    "InvalidCommitError",
    "InvalidDeltaBaseError",
    "InvalidHashError",
    "InvalidIdentityError",
    "InvalidObjectHeaderError",
    "InvalidObjectSizeError",
    "InvalidObjectTypeError",
    "InvalidPackMagicError",
    "InvalidTreeEntryError",
    "MissingObjectHeaderError",
    "NotCommitError",
    "NotGitRepository",
    "NotTreeError",
    "ObjectDecompressionError",
    "ObjectFormatException",
    "ObjectSizeMismatch",
    "PackDecompressionError",
    "PackFormatException",
    "PackObjectSizeMismatch",
    "TruncatedPackError",
    "TruncatedTreeEntryError",
    "UnknownCommitFieldError",
    "WrongObjectException",
]


class WrongObjectException(Exception):
    """Baseclass for all the _ is not a _ exceptions on objects.

    Do not instantiate directly.

    Subclasses should define a type_name attribute that indicates what
    was expected if they were raised.
    """

    type_name: str

    def __init__(self, sha: str, actual: str | None = None) -> None:
        """Initialize a WrongObjectException.

        Args:
            sha: The hex SHA of the object that was not of the expected type.
            actual: The type the object turned out to have, if known.
        """
        self.sha = sha
        self.actual = actual
        message = f"{sha} is not a {self.type_name}"
        if actual is not None:
            message += f" (it is a {actual})"
        Exception.__init__(self, message)


class NotCommitError(WrongObjectException):
    """Indicates that the sha requested does not point to a commit."""

    type_name = "commit"


class NotTreeError(WrongObjectException):
    """Indicates that the sha requested does not point to a tree."""

    type_name = "tree"


class NotGitRepository(Exception):
    """Indicates that no Git repository was found."""


class InvalidHashError(ValueError):
    """An object or pack name is not a 40 character hex string."""

    def __init__(self, sha: str) -> None:
        self.sha = sha
        super().__init__(f"invalid object name {sha!r}: expected 40 hex digits")


class FileFormatException(Exception):
    """Base class for exceptions relating to reading git file formats."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""


class ObjectDecompressionError(ObjectFormatException):
    """The zlib stream of a loose object could not be inflated."""


class MissingObjectHeaderError(ObjectFormatException):
    """No NUL byte terminates the ``type size`` header of a loose object."""

    def __init__(self) -> None:
        super().__init__("object header not found (no NUL separator)")


class InvalidObjectHeaderError(ObjectFormatException):
    """The header of a loose object has no space between type and size."""

    def __init__(self, header: bytes) -> None:
        self.header = header
        super().__init__(f"invalid object header {header!r}")


class InvalidObjectSizeError(ObjectFormatException):
    """The size field of a loose object header is not a decimal number."""

    def __init__(self, size_text: bytes) -> None:
        self.size_text = size_text
        super().__init__(f"invalid object size {size_text!r}")


class ObjectSizeMismatch(ObjectFormatException):
    """The declared size of an object differs from the payload length."""

    def __init__(self, declared: int, actual: int) -> None:
        self.declared = declared
        self.actual = actual
        super().__init__(
            f"wrong object size (have {actual} bytes, want {declared})"
        )


class InvalidIdentityError(ObjectFormatException):
    """An author/committer line does not follow ``NAME <EMAIL> TIME TZ``.

    ``field`` names the part that failed: ``format`` when the line does not
    match at all, ``timestamp`` or ``timezone`` when a number did not parse.
    ``header`` is set when the identity came from a commit header.
    """

    def __init__(self, text: str, field: str, header: str | None = None) -> None:
        self.text = text
        self.field = field
        self.header = header
        if header is None:
            message = f"invalid identity {text!r}: bad {field}"
        else:
            message = f"invalid {header} {text!r}: bad {field}"
        super().__init__(message)


class InvalidCommitError(ObjectFormatException):
    """A commit payload has no blank line between headers and message."""


class UnknownCommitFieldError(ObjectFormatException):
    """A commit header uses a tag other than tree/parent/author/committer."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"invalid field: {field!r}")


class InvalidTreeEntryError(ObjectFormatException):
    """A tree entry header is not ``<octal mode> <name>``."""

    def __init__(self, offset: int, reason: str) -> None:
        self.offset = offset
        super().__init__(f"offset {offset}: {reason}")


class TruncatedTreeEntryError(ObjectFormatException):
    """A tree payload ends in the middle of an entry."""

    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(f"offset {offset}: incomplete entry")


class PackFormatException(FileFormatException):
    """Indicates an error parsing a pack file."""


class InvalidPackMagicError(PackFormatException):
    """The pack does not start with ``PACK``."""

    def __init__(self, magic: bytes) -> None:
        self.magic = magic
        super().__init__(f"invalid magic {magic!r}")


class TruncatedPackError(PackFormatException):
    """The pack ended before a header or compressed stream was complete."""

    def __init__(self, offset: int, what: str) -> None:
        self.offset = offset
        super().__init__(f"offset {offset}: pack truncated in {what}")


class InvalidObjectTypeError(PackFormatException):
    """A pack object header carries type 0 or the reserved type 5."""

    def __init__(self, offset: int, type_num: int) -> None:
        self.offset = offset
        self.type_num = type_num
        super().__init__(f"offset {offset}: invalid object type {type_num}")


class PackDecompressionError(PackFormatException):
    """The compressed data of a pack object could not be inflated."""

    def __init__(self, offset: int, reason: str) -> None:
        self.offset = offset
        super().__init__(f"offset {offset}: {reason}")


class PackObjectSizeMismatch(PackFormatException):
    """A pack object inflated to a size other than the one in its header."""

    def __init__(self, offset: int, declared: int, actual: int) -> None:
        self.offset = offset
        self.declared = declared
        self.actual = actual
        super().__init__(
            f"offset {offset}: object inflated to {actual} bytes, want {declared}"
        )


class InvalidDeltaBaseError(PackFormatException):
    """An offset delta points before the first object of the pack."""

    def __init__(self, offset: int, base_distance: int) -> None:
        self.offset = offset
        self.base_distance = base_distance
        super().__init__(
            f"offset {offset}: delta base {base_distance} bytes back is outside the pack"
        )
