# tests/test_refs.py -- Tests for ref handling
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

"""Tests for tinygit.refs."""

import os
from unittest import mock

from tinygit.errors import FileReadError
from tinygit.file import FileLocked, GitFile
from tinygit.refs import (
    DiskRefsContainer,
    SymrefLoop,
    check_ref_format,
    parse_symref_value,
)

from . import TestCase
from .utils import make_temp_dir

ONE = b"1" * 40
TWO = b"2" * 40


class CheckRefFormatTests(TestCase):
    """Tests for the check_ref_format function."""

    def test_valid(self) -> None:
        self.assertTrue(check_ref_format(b"heads/foo"))
        self.assertTrue(check_ref_format(b"foo/bar/baz"))
        self.assertTrue(check_ref_format(b"remotes/origin/main"))

    def test_invalid(self) -> None:
        self.assertFalse(check_ref_format(b"foo"))
        self.assertFalse(check_ref_format(b"heads/foo/"))
        self.assertFalse(check_ref_format(b"./foo"))
        self.assertFalse(check_ref_format(b".refs/foo"))
        self.assertFalse(check_ref_format(b"heads/foo..bar"))
        self.assertFalse(check_ref_format(b"heads/foo?bar"))
        self.assertFalse(check_ref_format(b"heads/foo.lock"))
        self.assertFalse(check_ref_format(b"heads/v@{ation"))
        self.assertFalse(check_ref_format(b"heads/foo\\bar"))


class ParseSymrefValueTests(TestCase):
    def test_valid(self) -> None:
        self.assertEqual(b"refs/heads/foo", parse_symref_value(b"ref: refs/heads/foo"))
        self.assertEqual(b"refs/heads/foo", parse_symref_value(b"ref:refs/heads/foo"))

    def test_invalid(self) -> None:
        self.assertRaises(ValueError, parse_symref_value, b"foobar")


class DiskRefsContainerTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.controldir = make_temp_dir(self)
        self.refs = DiskRefsContainer(self.controldir)
        self.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")

    def test_head_file(self) -> None:
        with open(os.path.join(self.controldir, "HEAD"), "rb") as f:
            self.assertEqual(b"ref: refs/heads/main\n", f.read())

    def test_unborn_branch(self) -> None:
        self.assertEqual(
            ([b"HEAD", b"refs/heads/main"], None), self.refs.follow(b"HEAD")
        )
        self.assertRaises(KeyError, self.refs.__getitem__, b"HEAD")
        self.assertNotIn(b"refs/heads/main", self.refs)
        self.assertIn(b"HEAD", self.refs)

    def test_get_symrefs(self) -> None:
        self.assertEqual(b"refs/heads/main", self.refs.get_symrefs())
        self.refs.set_if_equals(b"refs/heads/main", None, ONE)
        self.assertIsNone(self.refs.get_symrefs(b"refs/heads/main"))
        self.assertIsNone(self.refs.get_symrefs(b"refs/heads/missing"))

    def test_set_if_equals_unconditional(self) -> None:
        self.assertTrue(self.refs.set_if_equals(b"HEAD", None, ONE))
        self.assertEqual(ONE, self.refs[b"HEAD"])
        self.assertEqual(ONE, self.refs[b"refs/heads/main"])
        with open(os.path.join(self.controldir, "refs", "heads", "main"), "rb") as f:
            self.assertEqual(ONE + b"\n", f.read())
        self.assertEqual(b"refs/heads/main", self.refs.get_symrefs())

    def test_set_if_equals(self) -> None:
        self.refs.set_if_equals(b"refs/heads/main", None, ONE)
        self.assertFalse(self.refs.set_if_equals(b"HEAD", TWO, TWO))
        self.assertEqual(ONE, self.refs[b"HEAD"])
        self.assertTrue(self.refs.set_if_equals(b"HEAD", ONE, TWO))
        self.assertEqual(TWO, self.refs[b"HEAD"])
        self.assertFalse(
            os.path.exists(os.path.join(self.controldir, "refs", "heads", "main.lock"))
        )

    def test_add_if_new(self) -> None:
        self.assertTrue(self.refs.add_if_new(b"HEAD", ONE))
        self.assertFalse(self.refs.add_if_new(b"HEAD", TWO))
        self.assertEqual(ONE, self.refs[b"refs/heads/main"])

    def test_detached_head(self) -> None:
        self.refs.set_if_equals(b"refs/heads/main", None, ONE)
        with GitFile(os.path.join(self.controldir, "HEAD"), "wb") as f:
            f.write(ONE + b"\n")
        self.assertIsNone(self.refs.get_symrefs())
        self.assertEqual(([b"HEAD"], ONE), self.refs.follow(b"HEAD"))
        self.assertTrue(self.refs.set_if_equals(b"HEAD", ONE, TWO))
        self.assertEqual(TWO, self.refs[b"HEAD"])
        self.assertEqual(ONE, self.refs[b"refs/heads/main"])

    def test_locked(self) -> None:
        self.refs.set_if_equals(b"refs/heads/main", None, ONE)
        lock = GitFile(self.refs.refpath(b"refs/heads/main"), "wb")
        self.addCleanup(lock.abort)
        self.assertRaises(FileLocked, self.refs.set_if_equals, b"HEAD", ONE, TWO)
        self.assertEqual(ONE, self.refs[b"HEAD"])

    def test_invalid_names(self) -> None:
        self.assertRaises(KeyError, self.refs.set_if_equals, b"main", None, ONE)
        self.assertRaises(
            KeyError, self.refs.set_symbolic_ref, b"HEAD", b"refs/heads/a..b"
        )

    def test_symref_loop(self) -> None:
        self.refs.set_symbolic_ref(b"refs/heads/a", b"refs/heads/b")
        self.refs.set_symbolic_ref(b"refs/heads/b", b"refs/heads/a")
        self.refs.set_symbolic_ref(b"HEAD", b"refs/heads/a")
        self.assertRaises(SymrefLoop, self.refs.follow, b"HEAD")

    def test_read_loose_ref(self) -> None:
        self.assertEqual(b"ref: refs/heads/main", self.refs.read_loose_ref(b"HEAD"))
        self.assertIsNone(self.refs.read_loose_ref(b"refs/heads/main"))
        with open(os.path.join(self.controldir, "packed"), "wb") as f:
            f.write(ONE + b"extra data after the sha\n")
        self.assertEqual(ONE, self.refs.read_loose_ref(b"packed"))

    def test_directory_is_missing_ref(self) -> None:
        self.refs.set_if_equals(b"HEAD", None, ONE)
        self.assertIsNone(self.refs.read_loose_ref(b"refs/heads"))
        self.assertNotIn(b"refs/heads", self.refs)

    def test_unreadable_ref(self) -> None:
        with mock.patch("tinygit.refs.GitFile", side_effect=PermissionError(13, "no")):
            self.assertRaises(
                FileReadError, self.refs.read_loose_ref, b"refs/heads/main"
            )

    def test_symref_without_space(self) -> None:
        self.refs.set_if_equals(b"refs/heads/other", None, ONE)
        with open(os.path.join(self.controldir, "HEAD"), "wb") as f:
            f.write(b"ref:refs/heads/other\n")
        self.assertEqual(b"ref: refs/heads/other", self.refs.read_loose_ref(b"HEAD"))
        self.assertEqual(b"refs/heads/other", self.refs.get_symrefs())
        self.assertEqual(
            ([b"HEAD", b"refs/heads/other"], ONE), self.refs.follow(b"HEAD")
        )
