# utils.py -- Test utilities for gitbin.
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

"""Utility functions common to gitbin tests.

Everything here writes git data by hand, so the tests do not depend on a
git binary being installed.
"""

import binascii
import hashlib
import os
import struct
import zlib
from collections.abc import Iterable, Sequence

from gitbin.objects import hex_to_filename
from gitbin.pack import OFS_DELTA, REF_DELTA

DEFAULT_IDENTITY = "Test Author <test@example.com> 1174773719 +0000"


def make_object_text(type_name: str, payload: bytes) -> bytes:
    """Return the inflated form of a loose object."""
    return f"{type_name} {len(payload)}".encode("ascii") + b"\0" + payload


def make_loose_object(type_name: str, payload: bytes) -> bytes:
    """Return the bytes of a loose object file."""
    return zlib.compress(make_object_text(type_name, payload))


def object_name(type_name: str, payload: bytes) -> str:
    """Return the hex name git would give an object."""
    return hashlib.sha1(make_object_text(type_name, payload)).hexdigest()


def make_tree_payload(entries: Iterable[tuple[int, str, str]]) -> bytes:
    """Build a tree payload from (mode, name, hexsha) tuples, kept in order."""
    ret = []
    for mode, name, hexsha in entries:
        ret.append(
            f"{mode:o} {name}".encode() + b"\0" + binascii.unhexlify(hexsha)
        )
    return b"".join(ret)


def make_commit_payload(
    tree: str,
    parents: Sequence[str] = (),
    author: str = DEFAULT_IDENTITY,
    committer: str = DEFAULT_IDENTITY,
    message: str = "Test message.\n",
) -> bytes:
    """Build a commit payload."""
    lines = [f"tree {tree}"]
    lines.extend(f"parent {parent}" for parent in parents)
    lines.append(f"author {author}")
    lines.append(f"committer {committer}")
    return ("\n".join(lines) + "\n\n" + message).encode("utf-8")


def make_repo(path: str, bare: bool = True) -> str:
    """Create the directory skeleton of a repository.

    Returns: The control directory (``path`` or ``path/.git``)
    """
    controldir = path if bare else os.path.join(path, ".git")
    os.makedirs(os.path.join(controldir, "objects", "pack"))
    return controldir


def write_loose_object(
    controldir: str, type_name: str, payload: bytes, name: str | None = None
) -> str:
    """Store a loose object and return its name.

    Args:
      controldir: Control directory of the repository
      type_name: Type to put in the object header
      payload: Object payload
      name: Name to store the object under (defaults to its real name)
    """
    if name is None:
        name = object_name(type_name, payload)
    return write_loose_file(
        controldir, name, make_loose_object(type_name, payload)
    )


def write_loose_file(controldir: str, name: str, contents: bytes) -> str:
    """Store raw bytes as a loose object file."""
    path = hex_to_filename(os.path.join(controldir, "objects"), name)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(contents)
    return name


def pack_object_header(
    type_num: int, size: int, delta_base: int | bytes | None = None
) -> bytes:
    """Create a pack object header for the given object info.

    Args:
      type_num: Numeric type of the object.
      size: Uncompressed object size.
      delta_base: Distance back to the base for offset deltas, binary name of
        the base for ref deltas.
    Returns: A header for a packed object.
    """
    header = []
    c = (type_num << 4) | (size & 15)
    size >>= 4
    while size:
        header.append(c | 0x80)
        c = size & 0x7F
        size >>= 7
    header.append(c)
    if type_num == OFS_DELTA:
        assert isinstance(delta_base, int)
        ret = [delta_base & 0x7F]
        delta_base >>= 7
        while delta_base:
            delta_base -= 1
            ret.insert(0, 0x80 | (delta_base & 0x7F))
            delta_base >>= 7
        header.extend(ret)
    elif type_num == REF_DELTA:
        assert isinstance(delta_base, bytes)
        return bytes(header) + delta_base
    return bytes(header)


def pack_header(num_objects: int, version: int = 2) -> bytes:
    return b"PACK" + struct.pack(">LL", version, num_objects)


def build_pack(
    objects_spec: Sequence[tuple],
    version: int = 2,
    num_objects: int | None = None,
    trailer: bool = True,
) -> tuple[bytes, list[int]]:
    """Write test pack data from a concise spec.

    Args:
      objects_spec: A list of (type_num, data) or (type_num, data, base).
        For offset deltas base is the index of an earlier entry, for ref
        deltas it is the hex name of the base. data is used as the inflated
        content as is; deltas are never computed.
      version: Version number to put in the header
      num_objects: Object count to put in the header (defaults to the
        number of entries)
      trailer: Whether to append the SHA-1 of the preceding bytes
    Returns: Tuple of (pack bytes, offset of each entry)
    """
    if num_objects is None:
        num_objects = len(objects_spec)
    buf = bytearray(pack_header(num_objects, version))
    offsets = []
    for spec in objects_spec:
        type_num, data = spec[0], spec[1]
        base = spec[2] if len(spec) > 2 else None
        offset = len(buf)
        delta_base: int | bytes | None = None
        if type_num == OFS_DELTA:
            delta_base = offset - offsets[base]
        elif type_num == REF_DELTA:
            delta_base = binascii.unhexlify(base)
        buf += pack_object_header(type_num, len(data), delta_base)
        buf += zlib.compress(data)
        offsets.append(offset)
    if trailer:
        buf += hashlib.sha1(buf).digest()
    return bytes(buf), offsets


def write_pack(controldir: str, data: bytes) -> str:
    """Store pack data in a repository and return the pack name."""
    name = hashlib.sha1(data).hexdigest()
    path = os.path.join(controldir, "objects", "pack", f"pack-{name}.pack")
    with open(path, "wb") as f:
        f.write(data)
    return name
