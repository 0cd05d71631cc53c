# tests/test_object_store.py -- Tests for the object store
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

"""Tests for the loose object store."""

import os
import zlib
from unittest import mock

from tinygit.errors import AmbiguousHash, CorruptObject, ObjectNotFound
from tinygit.object_store import DiskObjectStore
from tinygit.objects import Blob, Commit, Tree

from . import TestCase
from .utils import make_temp_dir


class DiskObjectStoreTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store_dir = os.path.join(make_temp_dir(self), "objects")
        self.store = DiskObjectStore.init(self.store_dir)

    def _write_loose(self, hexsha: bytes, data: bytes) -> str:
        name = hexsha.decode("ascii")
        dir = os.path.join(self.store_dir, name[:2])
        os.makedirs(dir, exist_ok=True)
        path = os.path.join(dir, name[2:])
        with open(path, "wb") as f:
            f.write(data)
        return path

    def test_init_existing(self) -> None:
        store = DiskObjectStore.init(self.store_dir)
        self.assertEqual(self.store_dir, store.path)

    def test_add_raw_layout(self) -> None:
        sha = self.store.add_raw(b"blob", b"hi")
        self.assertEqual(Blob.from_string(b"hi").id, sha)
        path = os.path.join(self.store_dir, sha[:2].decode(), sha[2:].decode())
        with open(path, "rb") as f:
            self.assertEqual(b"blob 2\0hi", zlib.decompress(f.read()))
        self.assertIn(sha, self.store)

    def test_add_twice(self) -> None:
        sha1 = self.store.add_raw(b"blob", b"hi")
        sha2 = self.store.add_raw(b"blob", b"hi")
        self.assertEqual(sha1, sha2)
        self.assertEqual([sha1], list(self.store))
        subdir = os.path.join(self.store_dir, sha1[:2].decode())
        self.assertEqual([sha1[2:].decode()], os.listdir(subdir))

    def test_add_ignores_stale_lock(self) -> None:
        expected = Blob.from_string(b"hi").id
        lock_path = self._write_loose(expected + b".lock", b"")
        self.assertEqual(expected, self.store.add_raw(b"blob", b"hi"))
        self.assertEqual((b"blob", b"hi"), self.store.get_raw(expected))
        self.assertTrue(os.path.exists(lock_path))

    def test_add_after_concurrent_write(self) -> None:
        sha = self.store.add_raw(b"blob", b"hi")
        with mock.patch("os.path.exists", return_value=False):
            self.assertEqual(sha, self.store.add_raw(b"blob", b"hi"))
        self.assertEqual([sha], list(self.store))

    def test_add_object(self) -> None:
        tree = Tree()
        tree.add(b"a.txt", 0o100644, Blob.from_string(b"hi").id)
        sha = self.store.add_object(tree)
        self.assertEqual(tree.id, sha)
        self.assertEqual(tree, self.store[sha])

    def test_empty_bodies(self) -> None:
        for type_name in (b"blob", b"tree"):
            sha = self.store.add_raw(type_name, b"")
            self.assertEqual((type_name, b""), self.store.get_raw(sha))

    def test_get_raw(self) -> None:
        sha = self.store.add_raw(b"blob", b"a\0b\n")
        self.assertEqual((b"blob", b"a\0b\n"), self.store.get_raw(sha))
        self.assertEqual((b"blob", b"a\0b\n"), self.store.get_raw(sha.upper()))

    def test_getitem_commit(self) -> None:
        c = Commit()
        c.tree = Tree().id
        c.author = c.committer = b"A <a@example.com>"
        c.message = b"m"
        sha = self.store.add_object(c)
        stored = self.store[sha]
        assert isinstance(stored, Commit)
        self.assertEqual(b"m", stored.message)

    def test_missing(self) -> None:
        self.assertRaises(ObjectNotFound, self.store.get_raw, b"1" * 40)
        self.assertNotIn(b"1" * 40, self.store)

    def test_invalid_id(self) -> None:
        self.assertRaises(ObjectNotFound, self.store.get_raw, b"xyz")
        self.assertRaises(ObjectNotFound, self.store.get_raw, b"g" * 40)
        self.assertNotIn(b"abc", self.store)

    def test_corrupt_compression(self) -> None:
        self._write_loose(b"1" * 40, b"not zlib at all")
        self.assertRaises(CorruptObject, self.store.get_raw, b"1" * 40)

    def test_corrupt_header(self) -> None:
        self._write_loose(b"1" * 40, zlib.compress(b"blob 2hi"))
        self._write_loose(b"2" * 40, zlib.compress(b"blob 5\0hi"))
        self.assertRaises(CorruptObject, self.store.get_raw, b"1" * 40)
        self.assertRaises(CorruptObject, self.store.get_raw, b"2" * 40)

    def test_iter_skips_lock_files(self) -> None:
        sha = self.store.add_raw(b"blob", b"hi")
        self._write_loose(b"ab" + b"0" * 38 + b".lock", b"")
        self._write_loose(b"abtmp_obj_x1y2z3", b"")
        with open(os.path.join(self.store_dir, "README"), "w") as f:
            f.write("not an object")
        self.assertEqual([sha], list(self.store))


class ResolvePrefixTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store_dir = os.path.join(make_temp_dir(self), "objects")
        self.store = DiskObjectStore.init(self.store_dir)
        self.sha = self.store.add_raw(b"blob", b"hi")

    def _touch(self, hexsha: bytes) -> None:
        name = hexsha.decode("ascii")
        dir = os.path.join(self.store_dir, name[:2])
        os.makedirs(dir, exist_ok=True)
        open(os.path.join(dir, name[2:]), "wb").close()

    def test_full(self) -> None:
        self.assertEqual(self.sha, self.store.resolve_prefix(self.sha))

    def test_seven_chars(self) -> None:
        self.assertEqual(self.sha, self.store.resolve_prefix(self.sha[:7]))
        self.assertEqual(self.sha, self.store.resolve_prefix(self.sha[:7].decode()))

    def test_uppercase(self) -> None:
        self.assertEqual(self.sha, self.store.resolve_prefix(self.sha[:10].upper()))

    def test_too_short(self) -> None:
        self.assertRaises(ObjectNotFound, self.store.resolve_prefix, self.sha[:6])
        self.assertRaises(ObjectNotFound, self.store.resolve_prefix, b"")

    def test_too_long(self) -> None:
        self.assertRaises(ObjectNotFound, self.store.resolve_prefix, self.sha + b"0")

    def test_not_hex(self) -> None:
        self.assertRaises(ObjectNotFound, self.store.resolve_prefix, b"zzzzzzz")

    def test_no_match(self) -> None:
        other = b"0" * 7 if not self.sha.startswith(b"0000000") else b"f" * 7
        self.assertRaises(ObjectNotFound, self.store.resolve_prefix, other)
        self.assertRaises(ObjectNotFound, self.store.resolve_prefix, b"1" * 40)

    def test_ambiguous(self) -> None:
        prefix = b"abcdef1"
        self._touch(prefix + b"0" * 33)
        self._touch(prefix + b"1" * 33)
        with self.assertRaises(AmbiguousHash) as cm:
            self.store.resolve_prefix(prefix)
        self.assertEqual(prefix, cm.exception.prefix)
        self.assertEqual(2, len(cm.exception.candidates))
        self.assertEqual(prefix + b"0" * 33, self.store.resolve_prefix(prefix + b"0"))
