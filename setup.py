"""
Setup script for drawlearn-engine.

drawlearn is the adaptive learning engine behind the Draw & Learn
vocabulary app for young English/Telugu learners. It decides:

1. Which pedagogical stage and difficulty a learner sees next
2. Which challenge to show, favouring under-practised modalities
3. When each word is due again (modified SM-2 with a mastery score)

The 'drawlearn' command is a developer CLI for exploring the engine.
"""

from setuptools import find_packages, setup

setup(
    name="drawlearn-engine",
    version="0.3.0",
    description="Adaptive stage selection and spaced repetition for children's vocabulary learning",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Draw & Learn",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    package_data={"drawlearn": ["data/*.json"]},
    include_package_data=True,
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
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "drawlearn=drawlearn.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition vocabulary children adaptive",
)
