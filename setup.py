#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Setup configuration for parcelflow package.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="parcelflow",
    version="0.1.0",
    author="parcelflow developers",
    description="Order, payment and shipment lifecycle core for parcel delivery",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["parcelflow", "parcelflow.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "tenacity>=8.0.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
        ],
    },
    include_package_data=True,
)
