from setuptools import setup, find_packages

setup(
    name="kdrapid",
    version="1.0.0",
    description="KDRapid - Implicit in-place k-d tree for nearest neighbor search",
    author="Dess4ever",
    packages=find_packages(include=["kdrapid", "kdrapid.*"]),
    install_requires=[
        "numpy>=1.24.0",
        "pyyaml>=6.0",
        "tqdm>=4.64.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "kdrapid=kdrapid.cli:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
