#!/usr/bin/env python3

from setuptools import setup, find_packages

setup(
    name="sierradec",
    version="0.1.0",
    description="Sierra program decompiler producing readable pseudo-source",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"sierradec.sierra": ["catalog.yaml"]},
    python_requires=">=3.11",
    install_requires=[
        "lark",
        "PyYAML",
        "json5",
    ],
    extras_require={
        "dev": ["pytest", "black", "mypy"],
    },
    entry_points={
        "console_scripts": [
            "sierradec=sierradec.cli:main",
        ],
    },
)
