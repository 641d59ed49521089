"""
repogen - Go Repository Layer Generator
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="repogen",
    version="1.0.0",
    author="Diegoproggramer",
    author_email="",
    description="⚡ Generate Go CRUD repositories from tagged structs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/Diegoproggramer/repogen",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "tree-sitter>=0.23.0",
        "tree-sitter-go>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "repogen=repogen.cli:cli_main",
        ],
    },
    keywords="go, golang, generator, repository, crud, postgres, code-generator",
    project_urls={
        "Bug Reports": "https://github.com/Diegoproggramer/repogen/issues",
        "Source": "https://github.com/Diegoproggramer/repogen",
    },
)
