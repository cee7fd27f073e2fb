"""
Setup script for the sunsight package.
"""

from setuptools import setup, find_packages
import os

HERE = os.path.abspath(os.path.dirname(__file__))


# Read the README file
def read_readme():
    with open(os.path.join(HERE, "README.md"), "r", encoding="utf-8") as fh:
        return fh.read()


# Read requirements
def read_requirements():
    with open(os.path.join(HERE, "requirements.txt"), "r", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip() and not line.startswith("#")]


setup(
    name="sunsight",
    version="0.1.0",
    description="Sun position, sun windows and building line-of-sight analysis for a map point",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["sunsight", "sunsight.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: GIS",
        "Topic :: Scientific/Engineering :: Astronomy",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.9",
    install_requires=read_requirements(),
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=21.0",
            "flake8>=3.8",
            "mypy>=0.800",
        ],
    },
    include_package_data=True,
    package_data={
        "": ["*.md", "*.txt"],
    },
    keywords="sun, solar, shadow, buildings, gis, geospatial, line-of-sight",
)
