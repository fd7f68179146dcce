"""Setup configuration for the Roster query engine package."""

from setuptools import setup, find_packages

setup(
    name="roster-query-engine",
    version="1.0.0",
    description="Filter state and query synchronization engine for the employee roster listing",
    author="Alex",
    author_email="",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"roster.config": ["*.yaml"]},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pandas>=2.1.0",
        "streamlit>=1.32.0",
        "httpx>=0.26.0",
        "pydantic>=2.5.0",
        "openpyxl>=3.1.0",
        "python-dotenv>=1.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
            "black>=24.1.0",
            "ruff>=0.2.0",
        ],
    },
)
