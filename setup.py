"""
Setup script for mongo-repository.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="mongo-repository",
    version="1.0.0",
    packages=find_packages(include=["mongo_repository", "mongo_repository.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pymongo>=4.13",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
)
