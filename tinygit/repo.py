# repo.py -- Repository access
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

"""Repository access.

This module contains the :class:`Repo` class, which ties together the object
store, the staging index and the refs of a repository on disk, and the
commit pipeline that moves staged content into history.
"""

__all__ = [
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "INDEX_FILENAME",
    "OBJECTDIR",
    "REFSDIR",
    "CommitInfo",
    "Repo",
    "get_user_identity",
]

import os
import time
from collections.abc import Iterable
from types import TracebackType
from typing import NamedTuple

from . import log_utils
from .config import ConfigFile
from .diff_tree import tree_diff_counts
from .errors import (
    ConfigMissing,
    FileReadError,
    FileWriteError,
    NotCommitError,
    NotGitRepository,
    NothingToCommit,
)
from .file import ensure_dir_exists
from .index import Index, blob_from_path, fs_to_tree_path, locked_index
from .object_store import DiskObjectStore
from .objects import Commit, ShaFile, parse_commit_tree
from .refs import HEADREF, LOCAL_BRANCH_PREFIX, DiskRefsContainer

logger = log_utils.getLogger(__name__)

CONTROLDIR = ".git"
OBJECTDIR = "objects"
REFSDIR = "refs"
INDEX_FILENAME = "index"
CONFIG_FILENAME = "config"

BASE_DIRECTORIES = [[OBJECTDIR], [REFSDIR]]

DEFAULT_BRANCH = b"main"


def get_user_identity(config: ConfigFile, kind: str | None = None) -> bytes:
    """Return the ``b"Name <email>"`` identity to record in a commit.

    When kind is given (``"AUTHOR"`` or ``"COMMITTER"``), GIT_<KIND>_NAME and
    GIT_<KIND>_EMAIL take precedence; whatever they leave unset is read from
    user.name and user.email.

    Raises:
      ConfigMissing: if no name or no email is configured
    """
    fields: dict[str, bytes] = {}
    for field in ("name", "email"):
        from_env = os.environ.get(f"GIT_{kind}_{field.upper()}") if kind else None
        if from_env is not None:
            fields[field] = from_env.encode("utf-8")
            continue
        try:
            fields[field] = config.get(("user",), field)
        except KeyError:
            raise ConfigMissing(f"user.{field}") from None
    email = fields["email"]
    if email.startswith(b"<") and email.endswith(b">"):
        email = email[1:-1]
    return fields["name"] + b" <" + email + b">"


class CommitInfo(NamedTuple):
    """Outcome of a commit, with the change summary against its parent."""

    id: bytes
    tree: bytes
    parent: bytes | None
    branch: bytes | None
    insertions: int
    deletions: int


class Repo:
    """A repository on local disk: working tree plus control directory.

    Open an existing repository with the constructor, or create one with
    :meth:`Repo.init`.

    Attributes:
      path: Path to the working tree
      object_store: Loose object store below the control directory
      refs: Refs container for HEAD and branches
    """

    path: str
    object_store: DiskObjectStore
    refs: DiskRefsContainer

    def __init__(self, root: str | bytes | os.PathLike[str]) -> None:
        """Open a repository on disk.

        Args:
          root: Path to the working tree, which holds the control directory
        Raises:
          NotGitRepository: if there is no usable repository at root
        """
        root = os.fsdecode(os.fspath(root))
        controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(os.path.join(controldir, OBJECTDIR)):
            raise NotGitRepository(f"No git repository was found at {root}")
        self.path = root
        self._controldir = controldir
        self.object_store = DiskObjectStore(os.path.join(controldir, OBJECTDIR))
        self.refs = DiskRefsContainer(controldir)

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    @classmethod
    def discover(cls, start: str | bytes | os.PathLike[str] = ".") -> "Repo":
        """Open the repository containing start, searching upwards.

        Raises:
          NotGitRepository: if neither start nor any parent is a repository
        """
        path = os.path.abspath(os.fsdecode(os.fspath(start)))
        while True:
            try:
                return cls(path)
            except NotGitRepository:
                new_path, _tail = os.path.split(path)
                if new_path == path:
                    break
                path = new_path
        raise NotGitRepository(
            f"No git repository was found at {os.fsdecode(os.fspath(start))}"
        )

    @classmethod
    def init(
        cls,
        path: str | os.PathLike[str],
        *,
        mkdir: bool = False,
        default_branch: bytes | None = None,
    ) -> "Repo":
        """Create a new repository, or reinitialize an existing one.

        The control directory, object store and refs directory are created
        if missing. HEAD is always rewritten to point at the default branch;
        existing objects, refs, index and config are left alone.

        Args:
          path: Path in which to create the repository
          mkdir: Whether to create the directory
          default_branch: Branch HEAD points at (defaults to ``main``)
        Returns: `Repo` instance
        """
        path = os.fspath(path)
        if mkdir:
            ensure_dir_exists(path)
        controldir = os.path.join(path, CONTROLDIR)
        ensure_dir_exists(controldir)
        for d in BASE_DIRECTORIES:
            ensure_dir_exists(os.path.join(controldir, *d))
        if default_branch is None:
            default_branch = DEFAULT_BRANCH
        ret = cls(path)
        ret.refs.set_symbolic_ref(HEADREF, LOCAL_BRANCH_PREFIX + default_branch)
        logger.debug("initialized repository in %s", controldir)
        return ret

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def index_path(self) -> str:
        """Return path to the index file."""
        return os.path.join(self.controldir(), INDEX_FILENAME)

    def open_index(self) -> Index:
        """Open the index for this repository.

        A repository without an index file has an empty index.
        """
        return Index(self.index_path())

    def get_config(self) -> ConfigFile:
        """Retrieve the config object.

        Returns: `ConfigFile` object for the ``.git/config`` file.
        """
        path = os.path.join(self.controldir(), CONFIG_FILENAME)
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            ret = ConfigFile()
            ret.path = path
            return ret

    def __getitem__(self, name: bytes) -> ShaFile:
        """Retrieve an object by its full sha."""
        return self.object_store[name]

    def head(self) -> bytes:
        """Return the SHA1 pointed at by HEAD.

        Raises:
          KeyError: if HEAD does not resolve to a commit yet
        """
        return self.refs[HEADREF]

    def _tree_path(self, fs_path: str | bytes) -> tuple[str, bytes]:
        fs_path = os.fsdecode(fs_path)
        if os.path.isabs(fs_path):
            full_path = fs_path
        else:
            full_path = os.path.join(self.path, fs_path)
        relpath = os.path.relpath(full_path, self.path)
        if relpath in (os.curdir, os.pardir) or relpath.startswith(
            os.pardir + os.sep
        ):
            raise FileReadError(fs_path, "outside repository")
        return full_path, fs_to_tree_path(relpath)

    def stage(self, fs_paths: str | bytes | Iterable[str | bytes]) -> None:
        """Stage a set of paths.

        Each file is stored as a blob and its index entry is added or
        replaced. The index is locked for the whole operation and left
        unchanged if any path cannot be read.

        Args:
          fs_paths: List of paths, relative to the repository path or
            absolute paths inside it
        Raises:
          FileReadError: if a file cannot be read
        """
        if isinstance(fs_paths, (str, bytes)):
            fs_paths = [fs_paths]
        with locked_index(self.index_path()) as index:
            for fs_path in fs_paths:
                full_path, tree_path = self._tree_path(fs_path)
                blob = blob_from_path(full_path)
                index[tree_path] = self.object_store.add_object(blob)
                logger.debug("staged %s as %s", full_path, blob.id.decode("ascii"))

    def do_commit(
        self,
        message: bytes,
        committer: bytes | None = None,
        author: bytes | None = None,
        commit_timestamp: float | None = None,
        commit_timezone: int | None = None,
        author_timestamp: float | None = None,
        author_timezone: int | None = None,
    ) -> CommitInfo:
        """Create a new commit from the staged changes.

        The parent is whatever HEAD resolves to, if anything. The branch HEAD
        points at (or HEAD itself, when detached) is moved to the new commit
        and the index is cleared. The index stays locked throughout; if any
        step fails, neither the ref nor the index is changed.

        Args:
          message: Commit message
          committer: Committer fullname
          author: Author fullname (defaults to committer)
          commit_timestamp: Commit timestamp (defaults to now)
          commit_timezone: Commit timestamp timezone (defaults to the local
            timezone)
          author_timestamp: Author timestamp (defaults to commit timestamp)
          author_timezone: Author timestamp timezone
            (defaults to commit timestamp timezone)
        Returns: `CommitInfo` for the new commit
        Raises:
          NothingToCommit: if the index is empty
          ConfigMissing: if no identity is configured
          FileWriteError: if the branch moved while committing
        """
        refnames, parent = self.refs.follow(HEADREF)
        ref = refnames[-1]
        if ref.startswith(LOCAL_BRANCH_PREFIX):
            branch: bytes | None = ref[len(LOCAL_BRANCH_PREFIX) :]
        elif ref != HEADREF:
            branch = ref
        else:
            branch = None
        parent_tree: bytes | None = None
        if parent is not None:
            parent_type, parent_body = self.object_store.get_raw(parent)
            if parent_type != Commit.type_name:
                raise NotCommitError(parent)
            parent_tree = parse_commit_tree(parent_body)

        with locked_index(self.index_path()) as index:
            if not len(index):
                raise NothingToCommit()
            tree_id = index.commit(self.object_store)

            c = Commit()
            c.tree = tree_id
            if parent is not None:
                c.parents = [parent]
            config = self.get_config()
            if committer is None:
                committer = get_user_identity(config, kind="COMMITTER")
            if author is None:
                try:
                    author = get_user_identity(config, kind="AUTHOR")
                except ConfigMissing:
                    author = committer
            now = time.time() if commit_timestamp is None else commit_timestamp
            if commit_timezone is None:
                commit_timezone = time.localtime(now).tm_gmtoff
            c.committer = committer
            c.commit_time = int(now)
            c.commit_timezone = commit_timezone
            c.author = author
            c.author_time = int(now if author_timestamp is None else author_timestamp)
            c.author_timezone = (
                commit_timezone if author_timezone is None else author_timezone
            )
            c.message = message
            commit_id = self.object_store.add_object(c)

            if parent is None:
                insertions, deletions = len(index), 0
            else:
                insertions, deletions = tree_diff_counts(
                    self.object_store, parent_tree, tree_id
                )

            if parent is None:
                ok = self.refs.add_if_new(HEADREF, commit_id)
            else:
                ok = self.refs.set_if_equals(HEADREF, parent, commit_id)
            if not ok:
                # The commit object stays behind as an unreferenced object.
                raise FileWriteError(
                    self.refs.refpath(ref), "ref was updated concurrently"
                )
            index.clear()

        logger.debug("committed %s", commit_id.decode("ascii"))
        return CommitInfo(commit_id, tree_id, parent, branch, insertions, deletions)

    def close(self) -> None:
        """Close any files opened by this repository."""

    def __enter__(self) -> "Repo":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
