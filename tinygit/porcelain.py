# porcelain.py -- Porcelain-like interface to tinygit
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

"""Simple wrapper that provides porcelain-like functions on top of tinygit.

Currently implemented:
 * add
 * cat_file
 * commit
 * config_get
 * config_set
 * hash_object
 * init
 * ls_tree
 * write_tree
 * write_tree_from_index

These functions are meant to behave similarly to the git subcommands.
Differences in behaviour are considered bugs.

Working tree paths passed to these functions are interpreted relative to the
repository root.
"""

__all__ = [
    "DEFAULT_ENCODING",
    "RepoPath",
    "add",
    "cat_file",
    "commit",
    "config_get",
    "config_set",
    "hash_object",
    "init",
    "ls_tree",
    "open_repo_closing",
    "print_commit_summary",
    "write_tree",
    "write_tree_from_index",
]

import os
import sys
from collections.abc import Iterator, Sequence
from contextlib import AbstractContextManager, closing, contextmanager
from typing import TextIO

from . import log_utils
from .hash import hexdigest
from .index import blob_from_path, commit_tree, fs_to_tree_path, iter_fs_paths
from .objects import Blob, TreeEntry, object_header
from .objectspec import parse_object, parse_tree, to_bytes
from .repo import CONTROLDIR, CommitInfo, Repo

logger = log_utils.getLogger(__name__)

# Default encoding for commit messages, identities and paths
DEFAULT_ENCODING = "utf-8"

RepoPath = str | os.PathLike[str] | Repo


@contextmanager
def _noop_context_manager(obj: Repo) -> Iterator[Repo]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


def open_repo_closing(path_or_repo: RepoPath) -> AbstractContextManager[Repo]:
    """Open an argument that can be a repository or a path for a repository.

    returns a context manager that will close the repo on exit if the argument
    is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, Repo):
        return _noop_context_manager(path_or_repo)
    return closing(Repo(path_or_repo))


def init(
    path: str | os.PathLike[str] = ".", *, default_branch: str | bytes | None = None
) -> Repo:
    """Create a new git repository.

    Running it again on an existing repository only resets HEAD.

    Args:
      path: Path to repository.
      default_branch: Branch HEAD points at (defaults to ``main``)
    Returns: A Repo instance
    """
    if default_branch is not None:
        default_branch = to_bytes(default_branch)
    return Repo.init(path, mkdir=True, default_branch=default_branch)


def hash_object(
    repo: RepoPath | None = None,
    path: str | bytes | None = None,
    data: bytes | None = None,
    write: bool = False,
    type_name: bytes = Blob.type_name,
) -> bytes:
    """Compute the object id of some content, optionally storing it.

    Args:
      repo: Repository to store the object in; only needed when writing
      path: File to read the content from
      data: Content to hash, when no path is given
      write: Whether to store the object
      type_name: Object type to hash the content as
    Returns: Hex SHA of the object
    """
    if path is not None:
        data = blob_from_path(path).data
    if data is None:
        raise ValueError("either path or data is required")
    if not write:
        return hexdigest(object_header(type_name, len(data)) + data)
    if repo is None:
        raise ValueError("a repository is required to write objects")
    with open_repo_closing(repo) as r:
        return r.object_store.add_raw(type_name, data)


def cat_file(repo: RepoPath, objectish: str | bytes) -> tuple[bytes, bytes]:
    """Retrieve the type and raw body of an object.

    Args:
      repo: Path to the repository
      objectish: Object name; a full or abbreviated sha, HEAD or a branch
    Returns: Tuple with type name and body
    """
    with open_repo_closing(repo) as r:
        return r.object_store.get_raw(parse_object(r, objectish))


def ls_tree(
    repo: RepoPath,
    treeish: str | bytes = b"HEAD",
    outstream: TextIO | None = sys.stdout,
    name_only: bool = False,
) -> list[TreeEntry]:
    """List contents of a tree.

    Args:
      repo: Path to the repository
      treeish: Tree id to list; a commit lists the tree it records
      outstream: Output stream, or None to print nothing
      name_only: Only print item name
    Returns: The tree entries, in tree order
    """
    with open_repo_closing(repo) as r:
        entries = parse_tree(r, treeish).items()
    if outstream is not None:
        for path, mode, sha in entries:
            name = path.decode(DEFAULT_ENCODING, "replace")
            if name_only:
                outstream.write(name + "\n")
            else:
                outstream.write(f"{mode:06o} blob {sha.decode('ascii')}\t{name}\n")
    return entries


def write_tree(repo: RepoPath) -> bytes:
    """Write a tree object from the working tree.

    Every regular file outside the control directory is stored as a blob and
    listed in a single flat tree. The index is left untouched.

    Args:
      repo: Repository for which to write tree
    Returns: tree id for the tree that was written
    """
    with open_repo_closing(repo) as r:
        items = []
        for relpath in iter_fs_paths(r.path, controldir=CONTROLDIR):
            blob = blob_from_path(os.path.join(r.path, relpath))
            items.append((fs_to_tree_path(relpath), r.object_store.add_object(blob)))
        return commit_tree(r.object_store, items)


def write_tree_from_index(repo: RepoPath) -> bytes:
    """Write a tree object from the index.

    Args:
      repo: Repository for which to write tree
    Returns: tree id for the tree that was written
    """
    with open_repo_closing(repo) as r:
        return r.open_index().commit(r.object_store)


def _expand_paths(r: Repo, paths: Sequence[str | bytes] | None) -> list[str]:
    if paths is None:
        paths = [os.curdir]
    expanded = []
    for path in paths:
        path = os.fsdecode(path)
        full_path = path if os.path.isabs(path) else os.path.join(r.path, path)
        if os.path.isdir(full_path):
            relpaths = iter_fs_paths(full_path, controldir=CONTROLDIR)
            expanded.extend(os.path.join(full_path, relpath) for relpath in relpaths)
        else:
            expanded.append(full_path)
    return expanded


def add(
    repo: RepoPath = ".", paths: str | bytes | Sequence[str | bytes] | None = None
) -> list[bytes]:
    """Add files to the staging area.

    Args:
      repo: Repository for the files
      paths: Paths to add, relative to the repository root or absolute.
        Directories are added recursively. If None, or ".", all files in
        the working tree are added.
    Returns: The tree paths that were staged
    """
    if isinstance(paths, (str, bytes)):
        paths = [paths]
    with open_repo_closing(repo) as r:
        fs_paths = _expand_paths(r, paths)
        r.stage(fs_paths)
        added = [
            fs_to_tree_path(os.path.relpath(fs_path, r.path)) for fs_path in fs_paths
        ]
    for tree_path in added:
        logger.debug("added %s", tree_path.decode(DEFAULT_ENCODING, "replace"))
    return added


def print_commit_summary(info: CommitInfo, message: bytes, outstream: TextIO) -> None:
    """Write the summary git prints after a commit."""
    branch = (
        info.branch.decode(DEFAULT_ENCODING, "replace")
        if info.branch is not None
        else "detached HEAD"
    )
    subject = message.decode(DEFAULT_ENCODING, "replace")
    outstream.write(f"[{branch} {info.id[:7].decode('ascii')}] {subject}\n")
    if info.parent is None:
        outstream.write(f"{info.insertions} insertions(+)\n")
    else:
        outstream.write(
            f"{info.insertions} insertions(+), {info.deletions} deletions(-)\n"
        )
    outstream.write(info.id.decode("ascii") + "\n")


def commit(
    repo: RepoPath = ".",
    message: str | bytes = b"",
    author: str | bytes | None = None,
    committer: str | bytes | None = None,
    author_timezone: int | None = None,
    commit_timezone: int | None = None,
    outstream: TextIO | None = None,
) -> bytes:
    """Create a new commit.

    Args:
      repo: Path to repository
      message: Commit message
      author: Optional author name and email
      committer: Optional committer name and email
      author_timezone: Author timestamp timezone
      commit_timezone: Commit timestamp timezone
      outstream: Stream to print the commit summary to, if any
    Returns: SHA1 of the new commit
    """
    message = to_bytes(message)
    with open_repo_closing(repo) as r:
        info = r.do_commit(
            message,
            author=to_bytes(author) if author is not None else None,
            committer=to_bytes(committer) if committer is not None else None,
            author_timezone=author_timezone,
            commit_timezone=commit_timezone,
        )
    if outstream is not None:
        print_commit_summary(info, message, outstream)
    return info.id


def _split_config_name(name: str) -> tuple[tuple[str, ...], str]:
    section, _, variable = name.rpartition(".")
    if not section or not variable:
        raise ValueError(f"key does not contain a section: {name}")
    section_name, dot, subsection = section.partition(".")
    if dot:
        return (section_name, subsection), variable
    return (section_name,), variable


def config_get(repo: RepoPath, name: str) -> bytes:
    """Read a value from the repository configuration.

    Args:
      repo: Path to repository
      name: Dotted setting name, e.g. ``user.email``
    Raises:
      KeyError: if the setting is not present
    """
    section, variable = _split_config_name(name)
    with open_repo_closing(repo) as r:
        return r.get_config().get(section, variable)


def config_set(repo: RepoPath, name: str, value: str | bytes) -> None:
    """Set a value in the repository configuration.

    Args:
      repo: Path to repository
      name: Dotted setting name, e.g. ``user.email``
      value: New value
    """
    section, variable = _split_config_name(name)
    with open_repo_closing(repo) as r:
        config = r.get_config()
        config.set(section, variable, value)
        config.write_to_path()
