#!/usr/bin/env python
import os
import re

from setuptools import find_packages, setup


def get_version():
    curdir = os.path.dirname(__file__)
    filename = os.path.join(curdir, "src", "skinprint", "version.py")
    with open(filename, "r") as f:
        return re.search(r'__version__ = "(.*?)"', f.read()).group(1)


def get_long_description():
    curdir = os.path.dirname(__file__)
    with open(os.path.join(curdir, "SPEC_FULL.md"), "r", encoding="utf-8") as f:
        return f.read()


setup(
    name="skinprint",
    version=get_version(),
    description="Tone-adaptive compositing of a tattoo design onto a skin photo",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.9",
    install_requires=[
        "attrs>=23.1.0",
        "numpy",
        "Pillow>=9.1.0",
        "aggdraw",
        "scipy",
        "scikit-image",
    ],
    extras_require={
        "tests": [
            "pytest",
            "pytest-cov",
        ],
    },
    entry_points={
        "console_scripts": [
            "skinprint=skinprint.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Graphics",
    ],
)
