"""
Setup script for exportgen

Installs the exportgen package together with its Jinja2 templates and the
``exportgen`` console script.
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from exportgen/__init__.py
def get_version():
    version_file = Path("exportgen/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="exportgen",
    version=get_version(),
    description="Boundary-safe export generator for annotated C++ functions",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.9",
    packages=find_packages(include=["exportgen", "exportgen.*"]),
    package_data={"exportgen": ["templates/*.j2"]},
    install_requires=[
        "jinja2>=3.0",
        "libclang>=16.0",
        "tomli>=1.1; python_version < '3.11'",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "exportgen=exportgen.cli:main",
        ],
    },
    zip_safe=False,  # Templates are loaded from the package directory
)
