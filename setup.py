from setuptools import setup, find_packages

setup(
    name="voltbox",
    version="0.1.0",
    description="Tick-based simulation engine for an educational circuit sandbox",
    author="Your Name",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "networkx",
        "matplotlib"
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.7",
)
