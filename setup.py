"""
Setup script for lob-quiz-engine.

The LOB quiz engine turns quiz content stored on learning objects (LOBs)
into validated quizzes, grades answers and runs quiz attempts. It serves
two roles:

1. Library - normalization, grading and the attempt state machine
2. Content Pipeline - `lobquiz validate` checks stored quiz JSON in CI
"""

from setuptools import find_packages, setup

setup(
    name="lob-quiz-engine",
    version="1.0.0",
    description="Normalization, grading and attempt engine for LOB quiz content",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lobquiz=src.cli.quiz_cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="quiz assessment grading lob education",
)
