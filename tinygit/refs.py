# refs.py -- Reading and updating refs
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

"""Ref handling.

Refs are small files below the control directory. A branch ref holds a
commit sha followed by a newline; ``HEAD`` holds either ``ref: <name>`` or,
when detached, a commit sha. Every update goes through the ref's lock file.
"""

__all__ = [
    "BAD_REF_CHARS",
    "HEADREF",
    "LOCAL_BRANCH_PREFIX",
    "SYMREF",
    "DiskRefsContainer",
    "SymrefLoop",
    "check_ref_format",
    "parse_symref_value",
]

import os

from . import log_utils
from .errors import FileReadError
from .file import GitFile, ensure_dir_exists

logger = log_utils.getLogger(__name__)

HEADREF = b"HEAD"
SYMREF = b"ref: "
# Written without the space by some tools.
_SYMREF_MARKER = SYMREF.rstrip()
LOCAL_BRANCH_PREFIX = b"refs/heads/"
BAD_REF_CHARS = set(b"\177 ~^:?*[")


class SymrefLoop(Exception):
    """Symbolic refs point at each other without ever reaching a value."""

    def __init__(self, ref: bytes, depth: int) -> None:
        self.ref = ref
        self.depth = depth
        super().__init__(f"symbolic ref loop at {ref!r} after {depth} levels")


def parse_symref_value(contents: bytes) -> bytes:
    """Return the target of a ``ref: <target>`` line.

    Raises:
      ValueError: if contents is not a symbolic ref
    """
    if contents.startswith(_SYMREF_MARKER):
        return contents[len(_SYMREF_MARKER) :].strip()
    raise ValueError(contents)


def check_ref_format(refname: bytes) -> bool:
    """Check a ref name against the git-check-ref-format rules for loose refs.

    Args:
      refname: Ref name without its ``refs/`` prefix, e.g. ``heads/main``
    Returns: Whether the name is acceptable
    """
    if b"/." in refname or refname.startswith(b"."):
        return False
    if b"/" not in refname:
        return False
    if b".." in refname or b"//" in refname:
        return False
    for c in refname:
        if c < 0o40 or c in BAD_REF_CHARS:
            return False
    if refname[-1] in b"/.":
        return False
    if refname.endswith(b".lock"):
        return False
    if b"@{" in refname or b"\\" in refname:
        return False
    return True


class DiskRefsContainer:
    """Refs container backed by loose ref files on disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        """Initialize the container.

        Args:
          path: The control directory, e.g. ``.git``
        """
        self.path = os.fspath(path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def _check_refname(self, name: bytes) -> None:
        """Ensure a refname is valid and lives in refs or is HEAD.

        Raises:
          KeyError: if a refname is not HEAD or is otherwise not valid.
        """
        if name == HEADREF:
            return
        if not name.startswith(b"refs/") or not check_ref_format(name[5:]):
            raise KeyError(name)

    def refpath(self, name: bytes) -> str:
        """Return the disk path of a ref."""
        return os.path.join(self.path, *os.fsdecode(name).split("/"))

    def read_loose_ref(self, name: bytes) -> bytes | None:
        """Return the raw contents of a loose ref file.

        A symbolic ref yields ``ref: <target>`` from its first line, with or
        without the space after the colon; any other ref yields at most the
        first 40 bytes, stripped. A directory, such as ``refs/heads``, counts
        as a missing ref.

        Args:
          name: the refname to read, relative to the control directory
        Returns: The ref contents, or None if there is no such ref file
        Raises:
          FileReadError: if the file exists but cannot be read
        """
        filename = self.refpath(name)
        try:
            with GitFile(filename, "rb") as f:
                header = f.read(len(_SYMREF_MARKER))
                if header == _SYMREF_MARKER:
                    return SYMREF + f.readline().strip()
                return (header + f.read(40 - len(header))).strip()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return None
        except OSError as exc:
            raise FileReadError(filename, exc) from exc

    def follow(self, name: bytes) -> tuple[list[bytes], bytes | None]:
        """Resolve a ref through any chain of symbolic refs.

        Returns: tuple of (refnames, value); refnames lists every ref visited,
            starting with name, and value is what the last one holds (None
            for a ref that does not exist yet)
        Raises:
          SymrefLoop: if the chain is longer than five links
        """
        contents: bytes | None = SYMREF + name
        depth = 0
        refnames = []
        while contents and contents.startswith(SYMREF):
            refname = parse_symref_value(contents)
            refnames.append(refname)
            contents = self.read_loose_ref(refname)
            if not contents:
                break
            depth += 1
            if depth > 5:
                raise SymrefLoop(name, depth)
        return refnames, contents

    def __contains__(self, refname: bytes) -> bool:
        return self.read_loose_ref(refname) is not None

    def __getitem__(self, name: bytes) -> bytes:
        """Return the sha a ref resolves to, following symbolic refs.

        Raises:
          KeyError: if the ref, or the ref it points at, does not exist
        """
        _, sha = self.follow(name)
        if sha is None:
            raise KeyError(name)
        return sha

    def get_symrefs(self, name: bytes = HEADREF) -> bytes | None:
        """Return the ref a symbolic ref points at, or None if it is not one."""
        contents = self.read_loose_ref(name)
        if contents is None or not contents.startswith(SYMREF):
            return None
        return parse_symref_value(contents)

    def set_symbolic_ref(self, name: bytes, other: bytes) -> None:
        """Point name at another ref, e.g. HEAD at ``refs/heads/main``.

        Args:
          name: Ref to rewrite
          other: Ref it should point at
        """
        self._check_refname(name)
        self._check_refname(other)
        filename = self.refpath(name)
        ensure_dir_exists(os.path.dirname(filename))
        with GitFile(filename, "wb") as f:
            f.write(SYMREF + other + b"\n")
        logger.debug("set %s to point at %s", name.decode(), other.decode())

    def _resolve_target(self, name: bytes) -> bytes:
        try:
            realnames, _ = self.follow(name)
        except SymrefLoop:
            return name
        return realnames[-1]

    def set_if_equals(self, name: bytes, old_ref: bytes | None, new_ref: bytes) -> bool:
        """Move a ref from old_ref to new_ref, if nobody moved it first.

        This method follows all symbolic references. The current value is
        read again while the ref's lock file is held, so concurrent writers
        cannot both succeed.

        Args:
          name: Ref to update; symbolic refs are followed to their target
          old_ref: Value the target must still hold, or None to overwrite
            whatever is there
          new_ref: Sha to store
        Returns: Whether the ref was updated
        """
        self._check_refname(name)
        realname = self._resolve_target(name)
        filename = self.refpath(realname)
        ensure_dir_exists(os.path.dirname(filename))
        with GitFile(filename, "wb") as f:
            if old_ref is not None:
                orig_ref = self.read_loose_ref(realname)
                if orig_ref != old_ref:
                    f.abort()
                    return False
            f.write(new_ref + b"\n")
        logger.debug("updated %s to %s", realname.decode(), new_ref.decode())
        return True

    def add_if_new(self, name: bytes, ref: bytes) -> bool:
        """Create a ref, unless it already exists.

        Symbolic refs are followed; only the ref at the end of the chain has
        to be absent.

        Args:
          name: Ref to create
          ref: Sha to store
        Returns: Whether the ref was created
        """
        self._check_refname(name)
        realname = self._resolve_target(name)
        filename = self.refpath(realname)
        ensure_dir_exists(os.path.dirname(filename))
        with GitFile(filename, "wb") as f:
            if self.read_loose_ref(realname) is not None:
                f.abort()
                return False
            f.write(ref + b"\n")
        logger.debug("created %s at %s", realname.decode(), ref.decode())
        return True
