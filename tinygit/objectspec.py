# objectspec.py -- Resolving object names
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

"""Resolving object names.

An object name is one of: ``HEAD``, a ref name (``main``, ``heads/main`` or
``refs/heads/main``), a full 40-digit sha, or an abbreviated sha of at least
seven hex digits.
"""

__all__ = [
    "parse_commit",
    "parse_object",
    "parse_ref",
    "parse_tree",
    "to_bytes",
]

from typing import TYPE_CHECKING

from .errors import NotCommitError, NotTreeError, ObjectNotFound
from .objects import Commit, ShaFile, Tree
from .refs import HEADREF, LOCAL_BRANCH_PREFIX

if TYPE_CHECKING:
    from .repo import Repo


def to_bytes(text: str | bytes) -> bytes:
    """Encode a command line argument as UTF-8, passing bytes through."""
    if isinstance(text, str):
        return text.encode("utf-8")
    return text


def parse_ref(repo: "Repo", refspec: str | bytes) -> bytes:
    """Expand a short ref name to the full name of an existing ref.

    ``name``, ``refs/name`` and ``refs/heads/name`` are tried in that order.

    Raises:
      KeyError: if none of them exists
    """
    refspec = to_bytes(refspec)
    for ref in (refspec, b"refs/" + refspec, LOCAL_BRANCH_PREFIX + refspec):
        if (ref == HEADREF or ref.startswith(b"refs/")) and ref in repo.refs:
            return ref
    raise KeyError(refspec)


def parse_object(repo: "Repo", objectish: str | bytes) -> bytes:
    """Resolve an object name to a full sha.

    Ref names take precedence over abbreviated shas.

    Args:
      repo: Repository to look in
      objectish: Ref name, full sha or abbreviated sha
    Returns: The full hex sha of the object
    Raises:
      ObjectNotFound: If nothing by that name exists
      AmbiguousHash: If an abbreviation matches more than one object
    """
    objectish = to_bytes(objectish)
    try:
        ref = parse_ref(repo, objectish)
    except KeyError:
        pass
    else:
        try:
            return repo.refs[ref]
        except KeyError:
            raise ObjectNotFound(objectish) from None
    return repo.object_store.resolve_prefix(objectish)


def parse_commit(repo: "Repo", committish: str | bytes) -> Commit:
    """Resolve an object name to a commit object.

    Raises:
      NotCommitError: If the object is not a commit
    """
    sha = parse_object(repo, committish)
    obj = repo[sha]
    if not isinstance(obj, Commit):
        raise NotCommitError(sha)
    return obj


def parse_tree(repo: "Repo", treeish: str | bytes | ShaFile) -> Tree:
    """Resolve an object name to a tree object.

    A commit resolves to the tree it records.

    Args:
      repo: Repository to look in
      treeish: Object name, or an already loaded Tree or Commit
    Raises:
      NotTreeError: If the object is neither a tree nor a commit
    """
    if isinstance(treeish, ShaFile):
        obj = treeish
    else:
        obj = repo[parse_object(repo, treeish)]
    if isinstance(obj, Commit):
        obj = repo[obj.tree]
    if not isinstance(obj, Tree):
        raise NotTreeError(obj.id)
    return obj
