#!/usr/bin/python3
# Setup file for tinygit
# Copyright (C) 2026 The tinygit developers
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

tests_require: list[str] = []


setup(
    name="tinygit",
    version="0.1.0",
    description="A small content-addressable version control store in the style of Git",
    long_description=open("DESIGN.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    license="Apache-2.0 OR GPL-2.0-or-later",
    packages=["tinygit"],
    package_data={"": ["py.typed"]},
    python_requires=">=3.10",
    install_requires=['typing_extensions >=4.0; python_version < "3.12"'],
    extras_require={"test": tests_require},
    entry_points={"console_scripts": ["tinygit=tinygit.cli:_main"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
