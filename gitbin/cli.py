# cli.py -- command line interface for gitbin
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

"""Simple command-line interface to gitbin.

This is a very simple command-line wrapper for inspecting loose objects and
pack files.
"""

import argparse
import os
import signal
import sys
import types
from collections.abc import Sequence

from . import log_utils
from .errors import FileFormatException, NotGitRepository, WrongObjectException
from .objects import TREE, Tree
from .pack import Chunk, Pack
from .repo import Repo

logger = log_utils.getLogger(__name__)


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


def _repo_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--repo", default=".", help="Path to the repository (default: %(default)s)"
    )
    return parser


class Command:
    """A gitbin subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_cat_object(Command):
    """Show the type, size or contents of a loose object."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the cat-object command.

        Args:
            args: Command line arguments
        """
        parser = _repo_parser(self.__doc__)
        group = parser.add_mutually_exclusive_group()
        group.add_argument("-t", action="store_true", help="Show the object type")
        group.add_argument("-s", action="store_true", help="Show the object size")
        group.add_argument(
            "-p", action="store_true", help="Pretty-print the object contents"
        )
        parser.add_argument("object", help="Object name (40 hex digits)")
        parsed_args = parser.parse_args(args)

        obj = Repo(parsed_args.repo).object(parsed_args.object)
        if parsed_args.t:
            sys.stdout.write(f"{obj.type}\n")
        elif parsed_args.s:
            sys.stdout.write(f"{obj.size}\n")
        elif parsed_args.p:
            if obj.type == TREE:
                sys.stdout.write(Tree.from_bytes(obj.data).as_pretty_string())
            else:
                sys.stdout.flush()
                sys.stdout.buffer.write(obj.data)
                sys.stdout.buffer.flush()
        else:
            sys.stdout.write(f"{obj.type} {obj.size}\n")


class cmd_show_commit(Command):
    """Show the decoded headers and message of a commit."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the show-commit command.

        Args:
            args: Command line arguments
        """
        parser = _repo_parser(self.__doc__)
        parser.add_argument("commit", help="Commit name (40 hex digits)")
        parsed_args = parser.parse_args(args)

        commit = Repo(parsed_args.repo).commit(parsed_args.commit)
        sys.stdout.write(f"tree {commit.tree}\n")
        for parent in commit.parents:
            sys.stdout.write(f"parent {parent}\n")
        sys.stdout.write(f"author {commit.author}\n")
        sys.stdout.write(f"Author date: {commit.author.datetime.isoformat()}\n")
        sys.stdout.write(f"committer {commit.committer}\n")
        sys.stdout.write(f"Commit date: {commit.committer.datetime.isoformat()}\n")
        sys.stdout.write("\n")
        sys.stdout.write(commit.log)


class cmd_ls_tree(Command):
    """List the entries of a tree object."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the ls-tree command.

        Args:
            args: Command line arguments
        """
        parser = _repo_parser(self.__doc__)
        parser.add_argument(
            "--name-only", action="store_true", help="List only entry names"
        )
        parser.add_argument("tree", help="Tree name (40 hex digits)")
        parsed_args = parser.parse_args(args)

        tree = Repo(parsed_args.repo).tree(parsed_args.tree)
        if parsed_args.name_only:
            for entry in tree:
                sys.stdout.write(f"{entry.name}\n")
        else:
            sys.stdout.write(tree.as_pretty_string())


class cmd_dump_pack(Command):
    """Dump the object records of a pack file."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the dump-pack command.

        Args:
            args: Command line arguments
        """
        parser = _repo_parser(self.__doc__)
        parser.add_argument("pack", help="Pack name in the repository, or a path")
        parsed_args = parser.parse_args(args)

        def progress(chunk: Chunk) -> None:
            logger.debug("read chunk %s", chunk)

        if os.path.isfile(parsed_args.pack):
            pack = Pack.from_path(parsed_args.pack, progress=progress)
        else:
            pack = Repo(parsed_args.repo).pack(parsed_args.pack, progress=progress)
        sys.stdout.write(f"Path: {pack.path}\n")
        sys.stdout.write(f"Version: {pack.version}\n")
        sys.stdout.write(f"Objects: {pack.num_objects}\n")
        for chunk in pack:
            sys.stdout.write(f"\t{chunk}\n")
        if len(pack) < pack.num_objects:
            logger.warning(
                "pack declares %d objects but only %d were found",
                pack.num_objects,
                len(pack),
            )


class cmd_list_packs(Command):
    """List the pack files of a repository."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the list-packs command.

        Args:
            args: Command line arguments
        """
        parser = _repo_parser(self.__doc__)
        parsed_args = parser.parse_args(args)

        for name in Repo(parsed_args.repo).pack_names():
            sys.stdout.write(f"{name}\n")


class cmd_list_objects(Command):
    """List the names of all loose objects of a repository."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the list-objects command.

        Args:
            args: Command line arguments
        """
        parser = _repo_parser(self.__doc__)
        parsed_args = parser.parse_args(args)

        for hexsha in Repo(parsed_args.repo).loose_objects():
            sys.stdout.write(f"{hexsha}\n")


class cmd_help(Command):
    """Display help information about gitbin."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the help command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser()
        parser.add_argument(
            "-a",
            "--all",
            action="store_true",
            help="List all commands.",
        )
        parsed_args = parser.parse_args(args)

        if parsed_args.all:
            sys.stdout.write("Available commands:\n")
            for cmd in sorted(commands):
                sys.stdout.write(f"  {cmd:<14}{commands[cmd].__doc__}\n")
        else:
            sys.stdout.write(
                "gitbin reads loose objects and pack files of a git repository.\n"
                "\n"
                "For a list of supported commands, see 'gitbin help -a'.\n"
            )


commands = {
    "cat-object": cmd_cat_object,
    "dump-pack": cmd_dump_pack,
    "help": cmd_help,
    "list-objects": cmd_list_objects,
    "list-packs": cmd_list_packs,
    "ls-tree": cmd_ls_tree,
    "show-commit": cmd_show_commit,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the gitbin CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        sys.stdout.write(
            "usage: gitbin <command> [options]\n"
            f"Available commands: {', '.join(sorted(commands))}\n"
        )
        return 1

    log_utils.default_logging_config()

    cmd = argv[0]
    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logger.fatal("No such subcommand: %s", cmd)
        return 1
    try:
        return cmd_kls().run(argv[1:])
    except (
        FileFormatException,
        NotGitRepository,
        WrongObjectException,
        OSError,
        ValueError,
    ) as e:
        logger.error("%s: %s", cmd, e)
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)

    sys.exit(main())


if __name__ == "__main__":
    _main()
