"""Setup script for line-merger"""
from setuptools import setup
from pathlib import Path
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""
setup(
    name="line-merger",
    version="1.0.0",
    author="Line Merger Project",
    author_email="info@line-merger.dev",
    description="Streaming line merger with filtering and credential extraction",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=["line_merger"],
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "progress": ["rich>=12.0.0", "tqdm>=4.60.0"],
        "dev": [
            "pytest>=6.0.0",
            "pytest-asyncio",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "rich>=12.0.0",
            "tqdm>=4.60.0",
        ],
        "full": ["rich>=12.0.0", "tqdm>=4.60.0"],
    },
    entry_points={
        "console_scripts": [
            "line-merger=line_merger:cli_main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Text Processing :: Filters",
        "Topic :: Utilities",
    ],
)
