"""
Setup configuration for adstudio package.
"""

from setuptools import setup, find_packages

setup(
    name="adstudio",
    version="0.3.0",
    description="Client core for AI ad creative generation and A/B testing",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.27",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "tenacity>=8.2",
        "numpy>=1.24",
        "click>=8.1",
        "logfire>=0.50",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "adstudio=adstudio.cli.main:cli",
        ],
    },
)
