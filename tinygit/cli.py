# cli.py -- Command-line interface
# Copyright (C) 2026 The tinygit developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# tinygit is dual-licensed under the Apache License, Version 2.0 and the GNU
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

"""Simple command-line interface to tinygit.

Each subcommand is a :class:`Command` subclass registered in ``commands``.
Library errors are reported as ``error: <message>`` and turn into exit
status 1.
"""

__all__ = [
    "Command",
    "commands",
    "main",
]

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from . import porcelain
from .errors import (
    AmbiguousHash,
    ConfigMissing,
    FileFormatException,
    FileReadError,
    FileWriteError,
    NotGitRepository,
    NothingToCommit,
    ObjectNotFound,
    WrongObjectException,
)
from .log_utils import default_logging_config
from .objects import Tree
from .refs import SymrefLoop

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

logger = logging.getLogger(__name__)

# Errors that end a command with a message instead of a traceback.
REPORTED_ERRORS = (
    AmbiguousHash,
    ConfigMissing,
    FileFormatException,
    FileReadError,
    FileWriteError,
    NotGitRepository,
    NothingToCommit,
    ObjectNotFound,
    SymrefLoop,
    ValueError,
    WrongObjectException,
)


class Command:
    """A tinygit subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create an empty repository or reinitialize an existing one."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit init")
        parser.add_argument(
            "-b", "--initial-branch", help="Branch HEAD points at (default: main)"
        )
        parser.add_argument(
            "path", nargs="?", default=os.getcwd(), help="Repository path"
        )
        parsed_args = parser.parse_args(args)
        repo = porcelain.init(
            parsed_args.path, default_branch=parsed_args.initial_branch
        )
        sys.stdout.write(f"Initialized empty Git repository in {repo.controldir()}\n")


class cmd_hash_object(Command):
    """Compute the object id of a file, and optionally store it."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit hash-object")
        parser.add_argument(
            "-w", dest="write", action="store_true", help="Write the object"
        )
        parser.add_argument(
            "-t", dest="type", default="blob", choices=["blob", "tree", "commit"]
        )
        parser.add_argument("path", help="File to hash")
        parsed_args = parser.parse_args(args)
        sha = porcelain.hash_object(
            "." if parsed_args.write else None,
            path=parsed_args.path,
            write=parsed_args.write,
            type_name=parsed_args.type.encode("ascii"),
        )
        sys.stdout.write(sha.decode("ascii") + "\n")


class cmd_cat_file(Command):
    """Show the type, size or content of a stored object."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit cat-file")
        group = parser.add_mutually_exclusive_group(required=True)
        group.add_argument("-p", dest="pretty", action="store_true")
        group.add_argument("-t", dest="show_type", action="store_true")
        group.add_argument("-s", dest="show_size", action="store_true")
        parser.add_argument("object", help="Object name, possibly abbreviated")
        parsed_args = parser.parse_args(args)
        type_name, body = porcelain.cat_file(".", parsed_args.object)
        if parsed_args.show_type:
            sys.stdout.write(type_name.decode("ascii") + "\n")
        elif parsed_args.show_size:
            sys.stdout.write(f"{len(body)}\n")
        elif type_name == Tree.type_name:
            tree = Tree.from_string(body)
            assert isinstance(tree, Tree)
            sys.stdout.write(tree.as_pretty_string())
        else:
            sys.stdout.flush()
            sys.stdout.buffer.write(body)
            sys.stdout.buffer.flush()


class cmd_ls_tree(Command):
    """List the contents of a tree object."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit ls-tree")
        parser.add_argument(
            "--name-only", action="store_true", help="Only display name."
        )
        parser.add_argument(
            "treeish", nargs="?", default="HEAD", help="Tree-ish to list"
        )
        parsed_args = parser.parse_args(args)
        porcelain.ls_tree(
            ".",
            parsed_args.treeish,
            outstream=sys.stdout,
            name_only=parsed_args.name_only,
        )


class cmd_read_tree(Command):
    """Describe the entries of a tree object, one per line."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit read-tree")
        parser.add_argument("treeish", help="Tree-ish to describe")
        parsed_args = parser.parse_args(args)
        entries = porcelain.ls_tree(".", parsed_args.treeish, outstream=None)
        sys.stdout.write("Tree Object Contents:\n")
        for path, mode, sha in entries:
            sys.stdout.write(
                f"Mode: {mode:o} | Path: {path.decode('utf-8', 'replace')} "
                f"| Hash: {sha.decode('ascii')}\n"
            )


class cmd_write_tree(Command):
    """Create a tree object from the working tree or the index."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit write-tree")
        parser.add_argument(
            "--from-index",
            action="store_true",
            help="Build the tree from the staged entries instead",
        )
        parsed_args = parser.parse_args(args)
        if parsed_args.from_index:
            sha = porcelain.write_tree_from_index(".")
        else:
            sha = porcelain.write_tree(".")
        sys.stdout.write(sha.decode("ascii") + "\n")


class cmd_add(Command):
    """Add file contents to the index."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit add")
        parser.add_argument("path", nargs="+", help="Files to stage, or . for all")
        parsed_args = parser.parse_args(args)
        paths = None if parsed_args.path == ["."] else parsed_args.path
        for path in porcelain.add(".", paths=paths):
            logger.info("Added %s", path.decode("utf-8", "replace"))


class cmd_commit(Command):
    """Record changes to the repository."""

    @override
    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="tinygit commit")
        parser.add_argument("--message", "-m", required=True, help="Commit message")
        parsed_args = parser.parse_args(args)
        porcelain.commit(".", message=parsed_args.message, outstream=sys.stdout)


class cmd_config(Command):
    """Get or set repository options."""

    @override
    def run(self, args: Sequence[str]) -> int | None:
        parser = argparse.ArgumentParser(prog="tinygit config")
        parser.add_argument("name", help="Setting name, e.g. user.email")
        parser.add_argument("value", nargs="?", help="New value")
        parsed_args = parser.parse_args(args)
        if parsed_args.value is not None:
            porcelain.config_set(".", parsed_args.name, parsed_args.value)
            return None
        try:
            value = porcelain.config_get(".", parsed_args.name)
        except KeyError:
            return 1
        sys.stdout.write(value.decode("utf-8", "replace") + "\n")
        return None


commands = {
    "add": cmd_add,
    "cat-file": cmd_cat_file,
    "commit": cmd_commit,
    "config": cmd_config,
    "hash-object": cmd_hash_object,
    "init": cmd_init,
    "ls-tree": cmd_ls_tree,
    "read-tree": cmd_read_tree,
    "write-tree": cmd_write_tree,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Run a tinygit subcommand.

    Args:
        argv: Command name followed by its arguments (defaults to
            sys.argv[1:])

    Returns:
        Exit status, or None for success
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        parser = argparse.ArgumentParser(
            prog="tinygit", description="Simple command-line interface to tinygit"
        )
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
        )
        parser.print_help()
        return 1

    default_logging_config()

    cmd = argv[0]
    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logger.error("No such subcommand: %s", cmd)
        return 1
    try:
        return cmd_kls().run(argv[1:])
    except REPORTED_ERRORS as e:
        logger.error("error: %s", e)
        return 1


def _main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    _main()
