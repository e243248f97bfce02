# SPDX-License-Identifier: LGPL-3.0-or-later
from setuptools import setup, find_packages

setup(
    name="ifupdown2networkd",
    version="0.1.0",
    description="Migrate ifupdown /etc/network/interfaces to systemd-networkd",
    python_requires=">=3.8",
    packages=find_packages(include=["ifupdown2networkd", "ifupdown2networkd.*"]),
    install_requires=[l.strip() for l in open("requirements.txt", encoding="utf-8") if l.strip() and not l.startswith("#")],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["ifupdown2networkd=ifupdown2networkd.__main__:main"]},
)
