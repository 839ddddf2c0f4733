# SPDX-License-Identifier: LGPL-3.0-or-later
from setuptools import setup, find_packages

setup(
    name="xenvbd",
    version="0.1.0",
    description="Reconcile XenServer VM disks and CD drives with declared records",
    packages=find_packages(include=["xenvbd", "xenvbd.*"]),
    python_requires=">=3.8",
    install_requires=[l.strip() for l in open("requirements.txt", encoding="utf-8") if l.strip() and not l.startswith("#")],
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["xenvbd=xenvbd.__main__:main"]},
)
