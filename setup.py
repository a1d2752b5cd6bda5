#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Offline circulation tools -- setuptools setup script.

Install:
    pip install .
    OR, with the test suite dependencies:
    pip install -e .[test]
"""

import os

from setuptools import setup

HERE = os.path.dirname(os.path.abspath(__file__))


# Read requirements from requirements.txt
def read_requirements():
    with open(os.path.join(HERE, 'requirements.txt')) as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]


setup(
    name="offline-circ-tools",
    version="1.0.0",
    description="Export and bulk import of KOC offline circulation files",
    license="GPL-3.0-or-later",
    platforms=["linux"],
    python_requires='>=3.8',
    packages=[
        "src",
        "src.core",
        "src.data_processing",
        "src.storage",
        "src.circulation",
        "src.cli",
    ],
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest>=7"],
    },
    scripts=[
        "scripts/export_offline_circ_log.py",
        "scripts/bulk_import_koc.py",
    ],
    data_files=[
        ("config", ["config/offline_circ.ini"]),
    ],
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Topic :: Database',
        'Topic :: Text Processing',
    ],
)
