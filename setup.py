"""
Setup script for cognitive-aura.

Cognitive Aura is the adaptive decision engine behind cognitive guidance
in the learning app. Given a learner's knowledge graph and spaced-repetition
history it decides:

1. Cognitive context - recovery, focus or overload
2. Target concept - what to work on next
3. Micro-task - a short actionable task, plus soundscape and visual hints

The 'aura' command runs the engine over JSON snapshots for tuning and debugging.
"""

from setuptools import find_packages, setup

setup(
    name="cognitive-aura",
    version="1.0.0",
    description="Adaptive cognitive-state decision engine for learning guidance",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Right Learning",
    packages=find_packages(include=["cognitive_aura", "cognitive_aura.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
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
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "aura=cognitive_aura.cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition cognitive adaptive education",
)
