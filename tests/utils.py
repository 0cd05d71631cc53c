# tests/utils.py -- Utility functions common to tinygit tests
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

"""Utility functions common to tinygit tests."""

import os
import shutil
import tempfile
import unittest

from tinygit.repo import Repo

# Plain files are very frequently used in tests, so let the mode be very short.
F = 0o100644  # Shorthand mode for Files.

TEST_IDENTITY = b"Test User <test@example.com>"

# 2010-01-01 00:00:00 UTC
DEFAULT_TIME = 1262304000


def make_temp_dir(testcase: unittest.TestCase) -> str:
    """Create a temporary directory that is removed after the test."""
    temp_dir = tempfile.mkdtemp()
    testcase.addCleanup(shutil.rmtree, temp_dir)
    return temp_dir


def init_temp_repo(testcase: unittest.TestCase, with_identity: bool = True) -> Repo:
    """Initialize a repository in a temporary directory.

    Args:
      testcase: Test that owns the repository; it is removed on cleanup
      with_identity: Whether to configure user.name and user.email
    Returns: The new repository
    """
    repo = Repo.init(make_temp_dir(testcase))
    if with_identity:
        config = repo.get_config()
        config.set(("user",), "name", "Test User")
        config.set(("user",), "email", "test@example.com")
        config.write_to_path()
    return repo


def write_file(repo: Repo, relpath: str, contents: bytes) -> str:
    """Write a file into the working tree of repo, creating directories."""
    path = os.path.join(repo.path, *relpath.split("/"))
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(contents)
    return path
