#!/usr/bin/env python3
"""
Setup script for the Pizza Roulette Slack bot
"""

from setuptools import setup, find_namespace_packages

setup(
    name="pizza-roulette",
    version="0.0.1",
    description="Slack socket mode bot answering /spin-* commands with a random pizza",
    packages=find_namespace_packages(include=["client*", "server*", "shared*", "roulette*"]),
    package_data={
        "roulette.data": ["*.yaml"],
    },
    install_requires=[
        "websockets>=15.0",
        "httpx>=0.27",
        "typer>=0.12.3",
        "rich>=13.9.2",
        "PyYAML>=6.0.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.4.2",
            "pytest-asyncio>=1.2.0",
        ],
    },
    python_requires=">=3.9",
    entry_points={
        'console_scripts': [
            'pizza-roulette=client.cli:main',
        ],
    },
)
