"""
Setup configuration for variantsite package.
"""

from setuptools import setup, find_packages

setup(
    name="variantsite",
    version="1.0.0",
    description="Customer-variant term substitution for headless CMS content",
    packages=find_packages(include=["variantsite", "variantsite.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "httpx>=0.25",
        "tenacity>=8.2",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "click>=8.1",
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "slowapi>=0.1.9",
        "logfire[httpx]>=0.40",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "variantsite=variantsite.cli.main:cli",
        ],
    },
)
