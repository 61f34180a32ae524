# setup.py
from setuptools import setup, find_packages

setup(
    name="aria_scout",
    version="0.1.0",
    description="KWCAG 2.2 web accessibility scanner and crawler",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"aria_scout.report": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "playwright>=1.40",
        "pydantic>=2.5",
        "soupsieve>=2.5",
        "PyYAML>=6.0",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "aria=aria_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
