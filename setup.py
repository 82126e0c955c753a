"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/open-fight-stick/ofs"
KEYWORDS = "embedded avr firmware avrdude dfu-programmer cargo microcontroller flash"
HERE = os.path.dirname(os.path.abspath(__file__))


def read_version() -> str:
    with open(os.path.join(HERE, "src", "ofsbuild", "__init__.py"), encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=", 1)[1].strip().strip('"')
    raise RuntimeError("Unable to find __version__")


if __name__ == "__main__":
    setup(
        name="ofsbuild",
        version=read_version(),
        description="Build and flash tooling for the Open Fight Stick firmware",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.9",
        package_dir={"": "src"},
        packages=find_packages("src"),
        install_requires=[
            "pyserial>=3.5",
            "tqdm>=4.0",
        ],
        extras_require={
            "test": ["pytest>=7.0"],
        },
        entry_points={
            "console_scripts": [
                "ofs=ofsbuild.cli:main",
            ],
        },
        include_package_data=True)
