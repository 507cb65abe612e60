"""
Setup script for the SOFA virtualizer package.
"""

from setuptools import setup, find_packages

setup(
    name="sofa-virtualizer",
    version="0.1.0",
    description="Binaural rendering of mono audio with measured HRIRs from SOFA files",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["virtualize"],
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "netCDF4>=1.6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
        "demo": [
            "matplotlib>=3.4.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Multimedia :: Sound/Audio :: Conversion",
    ],
    python_requires=">=3.8",
)
