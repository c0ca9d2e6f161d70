"""
Setup script for the gameshow-sync package.

Installs the session core (state model, reducer, sync and
persistence layers) from the src/ layout, together with its
SQLite schema file.
"""

from setuptools import setup, find_packages

setup(
    name="gameshow-sync",
    version="1.0.0",
    description="Game show session core - shared state, reducer and multi-client sync",
    author="Course Staff",
    license="Proprietary",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
        "dev": [
            "pytest>=7.4",
            "build",
            "wheel",
        ],
    },
    # Schema is read at runtime by init_database()
    package_data={
        "gameshow_sync._persistence": ["schema.sql"],
    },
    entry_points={
        "console_scripts": [
            "gameshow-sync=gameshow_sync.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
