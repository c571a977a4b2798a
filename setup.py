#!/usr/bin/env python3

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="nameforge",
    version="0.1.0",
    author="NameForge",
    description="Rename images by context: GPS place names, EXIF dates or AI content descriptions",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/frontmesh/nameforge",
    packages=find_packages(include=["nameforge", "nameforge.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Graphics",
        "Topic :: System :: Filesystems",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
    install_requires=[
        "Pillow>=9.1.0",
        "exifread>=3.0.0",
        "geopy>=2.3.0",
        "requests>=2.28.0",
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "nameforge=nameforge.cli:main",
            "nf=nameforge.cli:main",
        ],
    },
    keywords="image, rename, gps, exif, photo, location, ollama, ai",
    project_urls={
        "Bug Reports": "https://github.com/frontmesh/nameforge/issues",
        "Source": "https://github.com/frontmesh/nameforge",
    },
)
