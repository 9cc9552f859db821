from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/dppmap").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="csv-dpp-mapper",
    version="0.1.0",
    description="Map CSV columns onto a resolved JSON Schema and emit nested documents",
    python_requires=">=3.9",
    include_package_data=True,
    install_requires=[
        "typer>=0.9",
        "PyYAML>=6.0",
        "pydantic>=2.0",
        "pandas>=1.5",
        "rapidfuzz>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["dppmap=dppmap.cli:app"],
    },
    **pkg_args
)
