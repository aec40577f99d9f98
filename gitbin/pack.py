# pack.py -- For dealing with packed git objects.
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

"""Reading the framing of git pack files.

A pack starts with ``PACK``, a big-endian version and a big-endian object
count. Each object follows as a variable-length header and a zlib stream.

The header is variable length. If the MSB of each byte is set then it
indicates that the subsequent byte is still part of the header.
For the first byte the next MS bits are the type, which tells you the type
of object, and whether it is a delta. The LS nibble is the lowest bits of the
size. For each subsequent byte the LS 7 bits are the next MS bits of the
size, i.e. the last byte of the header contains the MS bits of the size.

The size in the header is the inflated size, so the only way to find where
the compressed data ends is to run it through zlib until the stream ends.
Delta objects are only described here, never resolved.
"""

__all__ = [
    "OFS_DELTA",
    "PACK_MAGIC",
    "REF_DELTA",
    "Chunk",
    "Pack",
    "PackStreamReader",
    "ProgressFn",
    "decode_object_header",
    "read_pack",
    "read_pack_header",
    "take_msb_bytes",
]

import os
import zlib
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from io import BytesIO
from struct import unpack_from
from typing import BinaryIO

from .errors import (
    InvalidDeltaBaseError,
    InvalidObjectTypeError,
    InvalidPackMagicError,
    PackDecompressionError,
    PackObjectSizeMismatch,
    TruncatedPackError,
)
from .objects import SHA_LENGTH, ObjType, sha_to_hex

PACK_MAGIC = b"PACK"
PACK_HEADER_LENGTH = 12

OFS_DELTA = ObjType.OFS_DELTA
REF_DELTA = ObjType.REF_DELTA


_ZLIB_BUFSIZE = 65536  # 64KB buffer for better I/O performance

ProgressFn = Callable[["Chunk"], None]


@dataclass(frozen=True)
class Chunk:
    """One object record inside a pack.

    Attributes:
      offset: Absolute offset of the object header in the pack
      size: Inflated size declared by the header
      type: Type number from the header
      delta_base: Absolute offset of the base for offset deltas, hex id of
        the base for ref deltas, None otherwise
    """

    offset: int
    size: int
    type: ObjType
    delta_base: int | str | None = None

    def __str__(self) -> str:
        text = f"offset={self.offset} size={self.size} type={self.type!s}"
        if self.delta_base is not None:
            text += f" base={self.delta_base}"
        return text


@dataclass(frozen=True)
class Pack:
    """Summary of a pack file: its header and the objects found in it."""

    path: str | None
    version: int
    num_objects: int
    chunks: tuple[Chunk, ...] = ()

    @classmethod
    def from_file(
        cls,
        f: BinaryIO,
        path: str | None = None,
        progress: ProgressFn | None = None,
    ) -> "Pack":
        """Read a pack from a file-like object. See :func:`read_pack`."""
        return read_pack(f, path=path, progress=progress)

    @classmethod
    def from_path(cls, path: str, progress: ProgressFn | None = None) -> "Pack":
        """Read the pack stored at path."""
        with open(path, "rb") as f:
            return read_pack(f, path=os.fspath(path), progress=progress)

    @classmethod
    def from_bytes(
        cls, data: bytes, path: str | None = None, progress: ProgressFn | None = None
    ) -> "Pack":
        """Read a pack held in memory."""
        return read_pack(BytesIO(data), path=path, progress=progress)

    def __len__(self) -> int:
        return len(self.chunks)

    def __iter__(self) -> Iterator[Chunk]:
        return iter(self.chunks)


def take_msb_bytes(read: Callable[[int], bytes]) -> list[int]:
    """Read bytes marked with most significant bit.

    Args:
      read: Read function
    Returns: List of the bytes read. If read() runs dry the list is returned
      as is, so the last byte may still have its MSB set (or the list may be
      empty).
    """
    ret: list[int] = []
    while len(ret) == 0 or ret[-1] & 0x80:
        b = read(1)
        if not b:
            break
        ret.append(b[0])
    return ret


def _unpack_type_and_size(raw: bytes | list[int], offset: int) -> tuple[ObjType, int]:
    type_num = (raw[0] >> 4) & 0x07
    try:
        obj_type = ObjType(type_num)
    except ValueError as e:
        raise InvalidObjectTypeError(offset, type_num) from e
    size = raw[0] & 0x0F
    for i, byte in enumerate(raw[1:]):
        size += (byte & 0x7F) << ((i * 7) + 4)
    return obj_type, size


def decode_object_header(data: bytes, offset: int = 0) -> tuple[int, ObjType, int]:
    """Decode the variable-length type and size header of a pack object.

    Args:
      data: Buffer holding the header
      offset: Position of the first header byte in data
    Returns: Tuple of (bytes consumed, object type, inflated size)
    Raises:
      TruncatedPackError: if data ends before the last header byte
      InvalidObjectTypeError: for the reserved type 5
    """
    end = offset
    while True:
        if end >= len(data):
            raise TruncatedPackError(offset, "object header")
        more = data[end] & 0x80
        end += 1
        if not more:
            break
    obj_type, size = _unpack_type_and_size(data[offset:end], offset)
    return end - offset, obj_type, size


def read_pack_header(read: Callable[[int], bytes]) -> tuple[int, int]:
    """Read the header of a pack file.

    Args:
      read: Read function
    Returns: Tuple of (pack version, number of objects)
    Raises:
      InvalidPackMagicError: if the file does not start with PACK
      TruncatedPackError: if fewer than 12 bytes are available
    """
    header = read(PACK_HEADER_LENGTH)
    if len(header) >= len(PACK_MAGIC) and header[:4] != PACK_MAGIC:
        raise InvalidPackMagicError(bytes(header[:4]))
    if len(header) < PACK_HEADER_LENGTH:
        raise TruncatedPackError(len(header), "pack header")
    (version,) = unpack_from(">L", header, 4)
    (num_objects,) = unpack_from(">L", header, 8)
    return (version, num_objects)


class PackStreamReader:
    """Class to read a pack stream.

    Data is pulled from the source in bounded pieces; no more than one read
    buffer is held at a time. Compressed data that zlib did not need is kept
    for the next header.
    """

    def __init__(
        self,
        read_all: Callable[[int], bytes],
        read_some: Callable[[int], bytes] | None = None,
        zlib_bufsize: int = _ZLIB_BUFSIZE,
    ) -> None:
        """Initialize pack stream reader.

        Args:
            read_all: Function to read all requested bytes (fewer only at EOF)
            read_some: Function to read some bytes (optional)
            zlib_bufsize: Buffer size for zlib decompression
        """
        self.read_all = read_all
        if read_some is None:
            self.read_some = read_all
        else:
            self.read_some = read_some
        self._zlib_bufsize = zlib_bufsize
        self._offset = 0
        self._rbuf = memoryview(b"")
        self._rpos = 0
        self.version: int | None = None
        self.num_objects: int | None = None

    def _read(self, read: Callable[[int], bytes], size: int) -> bytes:
        data = read(size)
        self._offset += len(data)
        return data

    def _buf_len(self) -> int:
        return len(self._rbuf) - self._rpos

    @property
    def offset(self) -> int:
        """Return current offset in the stream."""
        return self._offset - self._buf_len()

    def read(self, size: int) -> bytes:
        """Read, blocking until size bytes are read or the input ends."""
        buf_len = self._buf_len()
        if buf_len >= size:
            data = bytes(self._rbuf[self._rpos : self._rpos + size])
            self._rpos += size
            return data
        buf_data = bytes(self._rbuf[self._rpos :])
        self._rbuf = memoryview(b"")
        self._rpos = 0
        return buf_data + self._read(self.read_all, size - buf_len)

    def recv(self, size: int) -> memoryview:
        """Read up to size bytes, blocking until one byte is read.

        Returns an empty view only at the end of the input.
        """
        if not self._buf_len():
            self._rbuf = memoryview(self._read(self.read_some, size))
            self._rpos = 0
        data = self._rbuf[self._rpos : self._rpos + size]
        self._rpos += len(data)
        return data

    def _unrecv(self, count: int) -> None:
        # Everything handed to zlib came from the buffer, so unused input is
        # always the tail of the last recv().
        self._rpos -= count

    def _read_delta_base(self, obj_type: ObjType, offset: int) -> int | str | None:
        if obj_type == OFS_DELTA:
            raw = take_msb_bytes(self.read)
            if not raw or raw[-1] & 0x80:
                raise TruncatedPackError(offset, "delta base offset")
            delta_base_offset = raw[0] & 0x7F
            for byte in raw[1:]:
                delta_base_offset += 1
                delta_base_offset <<= 7
                delta_base_offset += byte & 0x7F
            if (
                delta_base_offset <= 0
                or delta_base_offset > offset - PACK_HEADER_LENGTH
            ):
                raise InvalidDeltaBaseError(offset, delta_base_offset)
            return offset - delta_base_offset
        elif obj_type == REF_DELTA:
            base = self.read(SHA_LENGTH)
            if len(base) < SHA_LENGTH:
                raise TruncatedPackError(offset, "delta base name")
            return sha_to_hex(base)
        return None

    def _skip_zlib_stream(self, offset: int, size: int) -> int:
        """Inflate one zlib stream without keeping its output.

        Returns: Number of compressed bytes the stream occupied
        """
        decomp_obj = zlib.decompressobj()
        comp_len = 0
        decomp_len = 0
        while not decomp_obj.eof:
            add = self.recv(self._zlib_bufsize)
            if not add:
                raise TruncatedPackError(offset, "compressed data")
            comp_len += len(add)
            data: bytes | memoryview = add
            try:
                while not decomp_obj.eof:
                    decomp = decomp_obj.decompress(data, self._zlib_bufsize)
                    decomp_len += len(decomp)
                    if decomp_len > size:
                        raise PackObjectSizeMismatch(offset, size, decomp_len)
                    data = decomp_obj.unconsumed_tail
                    # A full output buffer may leave output pending in zlib
                    # even once all input is consumed.
                    if not data and len(decomp) < self._zlib_bufsize:
                        break
            except zlib.error as e:
                raise PackDecompressionError(offset, str(e)) from e
        unused = len(decomp_obj.unused_data)
        if unused:
            self._unrecv(unused)
            comp_len -= unused
        if decomp_len != size:
            raise PackObjectSizeMismatch(offset, size, decomp_len)
        return comp_len

    def read_objects(self) -> Iterator[Chunk]:
        """Read the objects in this pack file.

        Reading stops after the number of objects given in the header, or
        earlier when the input ends exactly where a header would start. The
        trailing checksum is not verified.

        Returns: Iterator over Chunk records, in pack order
        Raises:
          PackFormatException: for any framing or compression problem
        """
        self.version, self.num_objects = read_pack_header(self.read)

        for _ in range(self.num_objects):
            offset = self.offset
            raw = take_msb_bytes(self.read)
            if not raw:
                break
            if raw[-1] & 0x80:
                raise TruncatedPackError(offset, "object header")
            obj_type, size = _unpack_type_and_size(raw, offset)
            if obj_type == ObjType.INVALID:
                raise InvalidObjectTypeError(offset, int(obj_type))
            delta_base = self._read_delta_base(obj_type, offset)
            self._skip_zlib_stream(offset, size)
            yield Chunk(offset=offset, size=size, type=obj_type, delta_base=delta_base)


def read_pack(
    f: BinaryIO,
    path: str | None = None,
    progress: ProgressFn | None = None,
    zlib_bufsize: int = _ZLIB_BUFSIZE,
) -> Pack:
    """Read the framing of a pack from a file-like object.

    Args:
      f: Binary file positioned at the start of the pack
      path: Path to record in the result
      progress: Optional callback invoked with each Chunk as it is read
      zlib_bufsize: Size of the reads used while inflating objects
    Returns: A Pack
    """
    reader = PackStreamReader(f.read, zlib_bufsize=zlib_bufsize)
    chunks = []
    for chunk in reader.read_objects():
        if progress is not None:
            progress(chunk)
        chunks.append(chunk)
    assert reader.version is not None and reader.num_objects is not None
    return Pack(
        path=path,
        version=reader.version,
        num_objects=reader.num_objects,
        chunks=tuple(chunks),
    )
