"""
Setup script for ralph.
"""

from setuptools import setup, find_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="ralph-cli",
    version="0.3.0",
    author="lyonbot",
    author_email="",
    description="A dispatcher for AI provider agents with a verified self-upgrade command",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/lyonbot/ralph-cli",
    packages=find_packages(include=["ralph", "ralph.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ralph=ralph.main:main",
        ],
    },
    scripts=["run.py"],
    keywords="cli ai agents self-update",
    project_urls={
        "Bug Reports": "https://github.com/lyonbot/ralph-cli/issues",
        "Source": "https://github.com/lyonbot/ralph-cli",
    },
)
