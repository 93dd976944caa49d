"""
Setup script for StepGrid

Installation:
    pip install -e .          # Development mode (editable install)
    pip install -e .[test]    # With the test tools
    pip install .             # Regular install

After installation, run with:
    stepgrid                  # Demo window
    python -m stepgrid.app    # Or directly
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).resolve().parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

# Read requirements
requirements_file = Path(__file__).resolve().parent / "requirements.txt"
install_requires = []
if requirements_file.exists():
    with open(requirements_file, "r", encoding="utf-8") as f:
        install_requires = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith("#")
        ]

setup(
    name="stepgrid",
    version="1.0.0",
    description="Interactive step-grid note editor widget for PyQt6",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="StepGrid",
    author_email="",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=install_requires or ["PyQt6>=6.5", "colorama>=0.4.6", "python-dotenv>=1.0"],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "stepgrid=stepgrid.app:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Multimedia :: Sound/Audio :: Editors",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    include_package_data=True,
)
