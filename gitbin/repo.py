# repo.py -- For dealing with git repositories.
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

"""Read-only access to the object files of a repository on disk.

Only loose objects are looked up by name; an object that lives only in a
pack is reported as missing. Packs can be read as a whole with
:meth:`Repo.pack`.
"""

__all__ = [
    "CONTROLDIR",
    "OBJECTDIR",
    "PACKDIR",
    "Repo",
]

import os
from collections.abc import Iterator

from .errors import InvalidHashError, NotCommitError, NotGitRepository, NotTreeError
from .log_utils import getLogger
from .objects import (
    COMMIT,
    TREE,
    Commit,
    Object,
    Tree,
    hex_to_filename,
    valid_hexsha,
)
from .pack import Pack, ProgressFn

CONTROLDIR = ".git"
OBJECTDIR = "objects"
PACKDIR = "pack"

PACK_PREFIX = "pack-"
PACK_SUFFIX = ".pack"

logger = getLogger(__name__)


class Repo:
    """A git repository backed by local disk.

    Attributes:
      path: Path the repository was opened with
      controldir: Directory holding ``objects/``; the same as ``path`` for
        bare repositories, ``path/.git`` for working copies
    """

    path: str
    controldir: str

    def __init__(self, root: str | os.PathLike[str]) -> None:
        """Open a repository on disk.

        Args:
          root: Path to a bare repository, a control directory or a working
            copy with a ``.git`` directory
        Raises:
          NotGitRepository: if no objects directory is found
        """
        root = os.fspath(root)
        hidden_path = os.path.join(root, CONTROLDIR)
        if os.path.isdir(os.path.join(hidden_path, OBJECTDIR)):
            self.controldir = hidden_path
        elif os.path.isdir(os.path.join(root, OBJECTDIR)):
            self.controldir = root
        else:
            raise NotGitRepository(f"No git repository was found at {root}")
        self.path = root

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} for {self.path!r}>"

    def object_dir(self) -> str:
        """Return path of the object directory."""
        return os.path.join(self.controldir, OBJECTDIR)

    def pack_dir(self) -> str:
        """Return path of the pack directory."""
        return os.path.join(self.object_dir(), PACKDIR)

    def object_path(self, hexsha: str) -> str:
        """Return the path a loose object with the given name would have.

        Raises:
          InvalidHashError: if hexsha is not 40 lowercase hex digits
        """
        if not valid_hexsha(hexsha):
            raise InvalidHashError(hexsha)
        return hex_to_filename(self.object_dir(), hexsha)

    def object(self, hexsha: str) -> Object:
        """Load and decode the loose object with the given name.

        Raises:
          InvalidHashError: if hexsha is not 40 lowercase hex digits
          FileNotFoundError: if there is no such loose object
          ObjectFormatException: if the file is not a valid loose object
        """
        path = self.object_path(hexsha)
        logger.debug("reading loose object %s", path)
        with open(path, "rb") as f:
            data = f.read()
        return Object.from_bytes(data, hash=hexsha)

    def __getitem__(self, hexsha: str) -> Object:
        return self.object(hexsha)

    def __contains__(self, hexsha: str) -> bool:
        return valid_hexsha(hexsha) and os.path.isfile(self.object_path(hexsha))

    def commit(self, hexsha: str) -> Commit:
        """Load a loose commit object and decode its payload.

        Raises:
          NotCommitError: if the object is not a commit
        """
        obj = self.object(hexsha)
        if obj.type != COMMIT:
            raise NotCommitError(hexsha, obj.type)
        return Commit.from_bytes(obj.data)

    def tree(self, hexsha: str) -> Tree:
        """Load a loose tree object and decode its payload.

        Raises:
          NotTreeError: if the object is not a tree
        """
        obj = self.object(hexsha)
        if obj.type != TREE:
            raise NotTreeError(hexsha, obj.type)
        return Tree.from_bytes(obj.data)

    def loose_objects(self) -> Iterator[str]:
        """Iterate over the names of all loose objects."""
        objdir = self.object_dir()
        for base in sorted(os.listdir(objdir)):
            if len(base) != 2:
                continue
            subdir = os.path.join(objdir, base)
            if not os.path.isdir(subdir):
                continue
            for rest in sorted(os.listdir(subdir)):
                hexsha = base + rest
                if valid_hexsha(hexsha):
                    yield hexsha

    def pack_path(self, pack_hash: str) -> str:
        """Return the path of the pack file with the given name."""
        if not valid_hexsha(pack_hash):
            raise InvalidHashError(pack_hash)
        return os.path.join(self.pack_dir(), PACK_PREFIX + pack_hash + PACK_SUFFIX)

    def pack_names(self) -> list[str]:
        """Return the names of all pack files, sorted."""
        try:
            names = os.listdir(self.pack_dir())
        except FileNotFoundError:
            return []
        return sorted(
            name[len(PACK_PREFIX) : -len(PACK_SUFFIX)]
            for name in names
            if name.startswith(PACK_PREFIX) and name.endswith(PACK_SUFFIX)
        )

    def pack(self, pack_hash: str, progress: ProgressFn | None = None) -> Pack:
        """Read the framing of the pack with the given name.

        Args:
          pack_hash: Name of the pack, as in ``pack-<name>.pack``
          progress: Optional callback invoked with each chunk as it is read
        Raises:
          FileNotFoundError: if there is no such pack
          PackFormatException: if the pack is malformed
        """
        path = self.pack_path(pack_hash)
        logger.debug("reading pack %s", path)
        return Pack.from_path(path, progress=progress)
