"""
Setup script for windtunnel_lbm package.
"""

from setuptools import setup, find_packages

setup(
    name="windtunnel_lbm",
    version="0.1.0",
    description="Lattice Boltzmann virtual wind tunnel with streamline tracing",
    author="Andrey",
    packages=find_packages(include=["windtunnel", "windtunnel.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "numba>=0.56",
        "matplotlib>=3.5",
        "scipy>=1.7",
    ],
    extras_require={
        "dev": ["pytest>=7.0", "black", "flake8"],
    },
)
