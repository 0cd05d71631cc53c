# diff_tree.py -- Comparing flat trees
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

"""Utilities for diffing trees."""

__all__ = [
    "CHANGE_ADD",
    "CHANGE_DELETE",
    "CHANGE_MODIFY",
    "TreeChange",
    "tree_changes",
    "tree_diff_counts",
]

from collections.abc import Iterator
from typing import NamedTuple

from .errors import NotTreeError
from .object_store import DiskObjectStore
from .objects import Tree, TreeEntry

CHANGE_ADD = "add"
CHANGE_MODIFY = "modify"
CHANGE_DELETE = "delete"


class TreeChange(NamedTuple):
    """Named tuple a single change between two trees."""

    type: str
    old: TreeEntry | None
    new: TreeEntry | None

    @classmethod
    def add(cls, new: TreeEntry) -> "TreeChange":
        return cls(CHANGE_ADD, None, new)

    @classmethod
    def delete(cls, old: TreeEntry) -> "TreeChange":
        return cls(CHANGE_DELETE, old, None)

    @property
    def path(self) -> bytes:
        """Path the change applies to."""
        entry = self.new if self.new is not None else self.old
        assert entry is not None
        return entry.path


def _tree_entries(
    store: DiskObjectStore, tree_id: bytes | None
) -> dict[bytes, TreeEntry]:
    if not tree_id:
        return {}
    tree = store[tree_id]
    if not isinstance(tree, Tree):
        raise NotTreeError(tree_id)
    return {entry.path: entry for entry in tree.items()}


def tree_changes(
    store: DiskObjectStore, tree1_id: bytes | None, tree2_id: bytes | None
) -> Iterator[TreeChange]:
    """Find the differences between the contents of two flat trees.

    A modified path is reported once, as a CHANGE_MODIFY. Unchanged paths
    are not reported.

    Args:
      store: An ObjectStore for looking up objects.
      tree1_id: The SHA of the source tree; None or empty for no tree.
      tree2_id: The SHA of the target tree; None or empty for no tree.
    Returns:
      Iterator over TreeChange instances, ordered by path.
    """
    entries1 = _tree_entries(store, tree1_id)
    entries2 = _tree_entries(store, tree2_id)
    for path in sorted(entries1.keys() | entries2.keys()):
        old = entries1.get(path)
        new = entries2.get(path)
        if old is None:
            assert new is not None
            yield TreeChange.add(new)
        elif new is None:
            yield TreeChange.delete(old)
        elif old.sha != new.sha:
            yield TreeChange(CHANGE_MODIFY, old, new)


def tree_diff_counts(
    store: DiskObjectStore, tree1_id: bytes | None, tree2_id: bytes | None
) -> tuple[int, int]:
    """Count insertions and deletions between two trees.

    An added path counts as one insertion, a removed path as one deletion,
    and a changed path as one of each.

    Returns: Tuple of (insertions, deletions)
    """
    insertions = deletions = 0
    for change in tree_changes(store, tree1_id, tree2_id):
        if change.type in (CHANGE_ADD, CHANGE_MODIFY):
            insertions += 1
        if change.type in (CHANGE_DELETE, CHANGE_MODIFY):
            deletions += 1
    return insertions, deletions
