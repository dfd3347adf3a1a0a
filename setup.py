#!/usr/bin/env python
from setuptools import setup, find_packages

setup(
    name="reparam",                                  # your PyPI/distribution name
    version="0.1.0",
    description="Reparameterization, Jacobian adjustment and Beta-Bernoulli estimators",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",

    # this will find the reparam/ package (and any subpackages),
    # but exclude tests, docs, examples, etc.
    packages=find_packages(exclude=["tests*", "docs*", "examples*"]),

    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
        "prefect>=3.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "flake8",
        ],
    },

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],

    include_package_data=False,   # True, if you have a MANIFEST.in or package_data
)
