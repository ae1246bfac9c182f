"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/gox-py/gox"
KEYWORDS = "go golang cross-compile cross-compilation toolchain parallel build"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="gox",
        version="0.4.0",
        description="Cross-compile Go programs for many platforms in parallel",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.9",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=["psutil"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["gox=gox.cli:main"]},
        include_package_data=True)
