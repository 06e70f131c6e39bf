"""Setup script for the project."""

from setuptools import setup, find_packages

setup(
    name="exercise-tracker",
    version="1.0.0",
    description="Exercise tracker API: users, exercise logs and log queries",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "motor>=3.3",
        "pymongo>=4.6",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-multipart>=0.0.9",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
        ],
    },
    python_requires=">=3.11",
)
