# objects.py -- Access to base git objects
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

"""Access to base git objects.

A loose object is a single zlib stream that inflates to
``"<type> <decimal size>\\0<payload>"``. Commit and tree payloads have their
own grammars, decoded by :class:`Commit` and :class:`Tree`. All values here
are immutable and built by a single decode call.
"""

__all__ = [
    "BLOB",
    "COMMIT",
    "HEX_SHA_LENGTH",
    "ID",
    "S_IFGITLINK",
    "S_IFLNK",
    "SHA_LENGTH",
    "TAG",
    "TREE",
    "Commit",
    "Entry",
    "ObjType",
    "Object",
    "Tree",
    "hex_to_filename",
    "iter_tree_entries",
    "parse_commit",
    "parse_identity",
    "parse_loose_object",
    "parse_tree",
    "sha_to_hex",
    "valid_hexsha",
]

import binascii
import os
import re
import stat
import zlib
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import NamedTuple, overload

from .errors import (
    InvalidCommitError,
    InvalidIdentityError,
    InvalidObjectHeaderError,
    InvalidObjectSizeError,
    InvalidTreeEntryError,
    MissingObjectHeaderError,
    ObjectDecompressionError,
    ObjectSizeMismatch,
    TruncatedTreeEntryError,
    UnknownCommitFieldError,
)

SHA_LENGTH = 20
HEX_SHA_LENGTH = 40

COMMIT = "commit"
TREE = "tree"
BLOB = "blob"
TAG = "tag"

# Header fields for commits
_TREE_HEADER = "tree"
_PARENT_HEADER = "parent"
_AUTHOR_HEADER = "author"
_COMMITTER_HEADER = "committer"

S_IFLNK = 0o120000
S_IFGITLINK = 0o160000

_HEX_SHA_RE = re.compile(r"[0-9a-f]{40}")


class ObjType(IntEnum):
    """Object type numbers as stored in pack object headers.

    Value 5 is reserved by git and has no member.
    """

    INVALID = 0
    COMMIT = 1
    TREE = 2
    BLOB = 3
    TAG = 4
    OFS_DELTA = 6
    REF_DELTA = 7

    def __str__(self) -> str:
        return _TYPE_NAMES[self]

    @property
    def is_delta(self) -> bool:
        """Whether objects of this type are stored against a base object."""
        return self in (ObjType.OFS_DELTA, ObjType.REF_DELTA)


_TYPE_NAMES = {
    ObjType.INVALID: "<invalid>",
    ObjType.COMMIT: COMMIT,
    ObjType.TREE: TREE,
    ObjType.BLOB: BLOB,
    ObjType.TAG: TAG,
    ObjType.OFS_DELTA: "offset-delta",
    ObjType.REF_DELTA: "ref-delta",
}

_TYPE_NUMS = {
    COMMIT: ObjType.COMMIT,
    TREE: ObjType.TREE,
    BLOB: ObjType.BLOB,
    TAG: ObjType.TAG,
}


def sha_to_hex(sha: bytes) -> str:
    """Takes a binary sha and returns the lowercase hex form."""
    hexsha = binascii.hexlify(sha).decode("ascii")
    assert len(hexsha) == HEX_SHA_LENGTH, f"Incorrect length of sha1: {hexsha}"
    return hexsha


def valid_hexsha(hexsha: str) -> bool:
    """Check whether hexsha is a 40 character lowercase hex object name."""
    return _HEX_SHA_RE.fullmatch(hexsha) is not None


def hex_to_filename(path: str, hexsha: str) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    return os.path.join(path, hexsha[:2], hexsha[2:])


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _decompress(data: bytes) -> bytes:
    dcomp = zlib.decompressobj()
    dcomped = dcomp.decompress(data)
    dcomped += dcomp.flush()
    if not dcomp.eof:
        raise zlib.error("incomplete or truncated stream")
    return dcomped


@dataclass(frozen=True)
class Object:
    """A loose object: its name, type tag and raw payload.

    The type is whatever the header said; ``type_num`` maps the four git
    kinds onto :class:`ObjType` and is ``None`` for anything else.
    """

    type: str
    data: bytes = field(repr=False)
    hash: str | None = None

    @property
    def type_num(self) -> ObjType | None:
        """The pack type number of this object, if it is a known kind."""
        return _TYPE_NUMS.get(self.type)

    @property
    def size(self) -> int:
        """Length of the payload in bytes."""
        return len(self.data)

    @classmethod
    def from_bytes(cls, data: bytes, hash: str | None = None) -> "Object":
        """Decode the contents of a loose object file.

        Args:
          data: Raw (compressed) bytes of the file
          hash: Optional hex name to attach to the result
        Returns: A new Object
        Raises:
          ObjectDecompressionError: if the zlib stream is broken
          MissingObjectHeaderError: if there is no NUL after the header
          InvalidObjectHeaderError: if the header has no space
          InvalidObjectSizeError: if the size is not a decimal number
          ObjectSizeMismatch: if the size differs from the payload length
        """
        try:
            blob = _decompress(data)
        except zlib.error as e:
            raise ObjectDecompressionError(f"uncompress: {e}") from e
        i = blob.find(b"\0")
        if i < 0:
            raise MissingObjectHeaderError()
        header = blob[:i]
        payload = blob[i + 1 :]
        kind, sep, size_text = header.partition(b" ")
        if not sep:
            raise InvalidObjectHeaderError(header)
        if not size_text.isdigit():
            raise InvalidObjectSizeError(size_text)
        size = int(size_text)
        if size != len(payload):
            raise ObjectSizeMismatch(size, len(payload))
        return cls(type=_decode_text(kind), data=payload, hash=hash)


def parse_loose_object(data: bytes, hash: str | None = None) -> Object:
    """Decode a loose object file. See :meth:`Object.from_bytes`."""
    return Object.from_bytes(data, hash=hash)


# The email may not contain angle brackets, so the name runs up to the last
# "<...>" pair on the line.
_ID_RE = re.compile(r"(.*?) <([^<>]*)> (\d+) ([-+]\d{4})", re.ASCII)


@dataclass(frozen=True)
class ID:
    """An author or committer identity.

    Attributes:
      name: Person name, may contain spaces and angle brackets
      email: Address found between the last pair of angle brackets
      time: Seconds since the epoch
      offset: Timezone as a signed HHMM number (``-0700`` is ``-700``)
      negative_utc: Whether a zero offset was written as ``-0000``, which git
        uses for an unknown timezone
    """

    name: str
    email: str
    time: int
    offset: int
    negative_utc: bool = False

    @classmethod
    def from_text(cls, text: str) -> "ID":
        """Parse ``NAME <EMAIL> EPOCHSECONDS +HHMM``.

        Raises:
          InvalidIdentityError: naming the part that did not parse
        """
        m = _ID_RE.fullmatch(text)
        if m is None:
            raise InvalidIdentityError(text, "format")
        name, email, timetext, tztext = m.groups()
        try:
            ts = int(timetext)
        except ValueError as e:
            raise InvalidIdentityError(text, "timestamp") from e
        try:
            offset = int(tztext, 10)
        except ValueError as e:
            raise InvalidIdentityError(text, "timezone") from e
        return cls(
            name=name,
            email=email,
            time=ts,
            offset=offset,
            negative_utc=tztext == "-0000",
        )

    @property
    def utcoffset_seconds(self) -> int:
        """The timezone offset converted to signed seconds east of UTC."""
        signum = -1 if self.offset < 0 else 1
        hours, minutes = divmod(abs(self.offset), 100)
        return signum * (hours * 3600 + minutes * 60)

    @property
    def datetime(self) -> datetime:
        """The timestamp as an aware datetime in the recorded timezone."""
        tz = timezone(timedelta(seconds=self.utcoffset_seconds))
        return datetime.fromtimestamp(self.time, tz)

    def __str__(self) -> str:
        sign = "-" if self.offset < 0 or self.negative_utc else "+"
        return f"{self.name} <{self.email}> {self.time} {sign}{abs(self.offset):04d}"


def parse_identity(text: str) -> ID:
    """Parse an identity line. See :meth:`ID.from_text`."""
    return ID.from_text(text)


@dataclass(frozen=True)
class Commit:
    """A decoded commit payload.

    The header grammar is strict: any tag other than tree, parent, author
    and committer is rejected.
    """

    tree: str
    parents: tuple[str, ...]
    author: ID
    committer: ID
    log: str

    @property
    def is_merge(self) -> bool:
        """Whether the commit has more than one parent."""
        return len(self.parents) > 1

    @classmethod
    def from_bytes(cls, data: bytes) -> "Commit":
        """Decode the payload of a commit object.

        Raises:
          InvalidCommitError: if no blank line ends the headers, or the
            author or committer is missing
          UnknownCommitFieldError: for a header tag that is not recognized
          InvalidIdentityError: for a malformed author or committer
        """
        text = _decode_text(data)
        header, sep, log = text.partition("\n\n")
        if not sep:
            raise InvalidCommitError("invalid commit: no blank line after headers")
        tree = ""
        parents: list[str] = []
        author = committer = None
        for line in header.split("\n"):
            tag, _, value = line.partition(" ")
            if tag == _TREE_HEADER:
                tree = value
            elif tag == _PARENT_HEADER:
                parents.append(value)
            elif tag == _AUTHOR_HEADER:
                author = _parse_header_identity(tag, value)
            elif tag == _COMMITTER_HEADER:
                committer = _parse_header_identity(tag, value)
            else:
                raise UnknownCommitFieldError(tag)
        if author is None:
            raise InvalidCommitError("invalid commit: missing author")
        if committer is None:
            raise InvalidCommitError("invalid commit: missing committer")
        return cls(
            tree=tree,
            parents=tuple(parents),
            author=author,
            committer=committer,
            log=log,
        )


def _parse_header_identity(header: str, value: str) -> ID:
    try:
        return ID.from_text(value)
    except InvalidIdentityError as e:
        raise InvalidIdentityError(value, e.field, header=header) from e


def parse_commit(data: bytes) -> Commit:
    """Decode a commit payload. See :meth:`Commit.from_bytes`."""
    return Commit.from_bytes(data)


class Entry(NamedTuple):
    """Named tuple encapsulating a single tree entry."""

    mode: int
    type: str
    hash: str
    name: str

    @property
    def is_symlink(self) -> bool:
        """Whether the entry is a symbolic link (reported as a blob)."""
        return stat.S_IFMT(self.mode) == S_IFLNK

    @property
    def is_gitlink(self) -> bool:
        """Whether the entry points at a submodule commit (reported as a tree)."""
        return stat.S_IFMT(self.mode) == S_IFGITLINK

    def __str__(self) -> str:
        return f"{self.mode:06o} {self.type} {self.hash}\t{self.name}"


def _entry_type(mode: int) -> str:
    # Only the directory bit is consulted: symlinks report as blob, gitlinks
    # (160000) as tree.
    if mode & stat.S_IFDIR:
        return TREE
    return BLOB


def iter_tree_entries(data: bytes) -> Iterator[Entry]:
    """Iterate over the entries of a tree payload in on-disk order.

    Args:
      data: Raw tree payload
    Returns: Iterator over Entry tuples
    Raises:
      TruncatedTreeEntryError: if the payload ends inside an entry
      InvalidTreeEntryError: if an entry header is malformed
    """
    count = 0
    length = len(data)
    while count < length:
        name_end = data.find(b"\0", count)
        if name_end < 0 or name_end + 1 + SHA_LENGTH > length:
            raise TruncatedTreeEntryError(count)
        mode_text, sep, name = data[count:name_end].partition(b" ")
        if not sep:
            raise InvalidTreeEntryError(count, "missing space after mode")
        if not mode_text or mode_text.strip(b"01234567"):
            raise InvalidTreeEntryError(count, f"invalid mode {mode_text!r}")
        mode = int(mode_text, 8)
        if mode > 0xFFFFFFFF:
            raise InvalidTreeEntryError(count, f"mode {mode_text!r} out of range")
        sha = data[name_end + 1 : name_end + 1 + SHA_LENGTH]
        yield Entry(mode, _entry_type(mode), sha_to_hex(sha), _decode_text(name))
        count = name_end + 1 + SHA_LENGTH


@dataclass(frozen=True)
class Tree:
    """An ordered sequence of tree entries, in the order stored on disk."""

    entries: tuple[Entry, ...] = ()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Tree":
        """Decode a tree payload. See :func:`iter_tree_entries`."""
        return cls(tuple(iter_tree_entries(data)))

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @overload
    def __getitem__(self, index: int) -> Entry: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Entry, ...]: ...

    def __getitem__(self, index: int | slice) -> Entry | tuple[Entry, ...]:
        return self.entries[index]

    def lookup(self, name: str) -> Entry:
        """Find the entry with the given name.

        Raises:
          KeyError: if no entry has that name
        """
        for entry in self.entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def as_pretty_string(self) -> str:
        """Render the tree the way ``git ls-tree`` does."""
        return "".join(f"{entry}\n" for entry in self.entries)


def parse_tree(data: bytes) -> Tree:
    """Decode a tree payload. See :meth:`Tree.from_bytes`."""
    return Tree.from_bytes(data)
