from setuptools import setup, find_packages

setup(
    name="label_coarsening",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "numba",
        "click",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "label-coarsening=label_coarsening.cli:main",
        ],
    },
    author="Connor Frankston",
    description="Size-constrained label propagation clustering for multilevel graph coarsening",
    python_requires=">=3.8",
)
