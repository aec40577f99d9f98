#!/usr/bin/python3
# Setup file for gitbin
# Copyright (C) 2026 The gitbin Authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

gitbin_version_string = "0.1.0"

setup(
    name="gitbin",
    version=gitbin_version_string,
    description="Decoders for git loose objects and pack files",
    keywords="git binary format loose object pack",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["gitbin"],
    package_data={"gitbin": ["py.typed"]},
    entry_points={"console_scripts": ["gitbin=gitbin.cli:_main"]},
    test_suite="tests.test_suite",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
