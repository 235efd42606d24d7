# -*- coding: utf-8 -*-
from setuptools import setup, find_packages

long_description = "Streaming and batch technical indicators with identical results tick by tick"

setup(
    name = "tickta",
    packages = find_packages(include=["tickta", "tickta.*"]),
    version = "0.1.0",
    description=long_description,
    long_description=long_description,
    keywords = ['technical analysis', 'python3', 'pandas', 'streaming'],
    license="The MIT License (MIT)",
    classifiers = [
        'Programming Language :: Python :: 3',
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Intended Audience :: Developers',
        'Intended Audience :: Financial and Insurance Industry',
        'Topic :: Office/Business :: Financial :: Investment',
    ],
    python_requires=">=3.8",
    install_requires=['pandas', 'numpy'],

    # List additional groups of dependencies here (e.g. development dependencies).
    # You can install these using the following syntax, for example:
    # $ pip install -e .[dev,test]
    extras_require = {
        'dev': ['pytest', 'jupyterlab'],
        'test': ['pytest'],
    },
)
