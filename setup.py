from setuptools import setup, find_packages

setup(
    name="format_applier",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "lxml>=4.9",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "format-applier=format_applier.cli:main",
        ],
    },
    description="Run clang-format and apply its byte-offset replacements to documents.",
)
