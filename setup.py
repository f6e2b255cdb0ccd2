#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import re

from setuptools import setup


def find_version():
    filepath = os.path.join("gseabench", "__main__.py")
    with open(os.path.join(os.path.dirname(__file__), filepath), encoding="utf8") as fp:
        content = fp.read()
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", content, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


__version__ = find_version()


def readme():
    with open("README.rst") as f:
        return f.read()


setup(
    name="gseabench",
    version=__version__,
    description="Benchmarking of Gene Set Enrichment Analysis methods in Python",
    long_description=readme(),
    long_description_content_type="text/x-rst",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Operating System :: MacOS :: MacOS X",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Software Development :: Libraries",
    ],
    keywords=[
        "Gene Set Enrichment",
        "Benchmark",
        "Phenotype Relevance",
        "Bioinformatics",
        "Computational Biology",
    ],
    license="MIT",
    packages=["gseabench"],
    include_package_data=False,
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.13.0",
        "pandas",
        "joblib",
        "requests",
        "urllib3",
        "gseapy>=1.0",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["gseabench = gseabench.__main__:main"],
    },
    zip_safe=False,
)
