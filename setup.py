"""Setup script for smartsupply-tracker package following Cosmic Python pattern."""

from setuptools import setup, find_namespace_packages

setup(
    name="smartsupply-tracker",
    version="1.0.0",
    description="SmartSupply - supply-chain provenance tracking on a simulated append-only ledger",
    author="SmartSupply Team",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["provenance*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn[standard]",
        "pydantic>=2",
        "redis",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "httpx",
            "fakeredis",
        ],
        "dev": [
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
    },
    entry_points={
        "console_scripts": [
            "smartsupply-api=provenance.entrypoints.tracker_api:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Manufacturing",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Topic :: Office/Business",
    ],
)
