"""Setup script for AdiHunt."""

from setuptools import setup, find_packages

setup(
    name="adihunt",
    version="0.3.0",
    description="AI-assisted SEO content generation, scoring and collaboration",
    author="AdiHunt",
    packages=find_packages(include=["adihunt", "adihunt.*"]),
    include_package_data=True,
    install_requires=[
        "sqlalchemy>=2.0.0",
        "click>=8.1.0",
        "rich>=13.6.0",
        "requests>=2.31.0",
        "tenacity>=8.2.0",
        "loguru>=0.7.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dateutil>=2.8.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "adihunt=adihunt.cli:main",
        ],
    },
    python_requires=">=3.10",
)
