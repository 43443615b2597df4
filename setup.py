"""
Setup script for m6A Predictor package.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
if requirements_file.exists():
    with open(requirements_file) as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]
else:
    requirements = ["numpy>=1.21", "pandas>=1.5", "scikit-learn>=1.0"]

# Read README
readme_file = Path(__file__).parent / "README.md"
if readme_file.exists():
    with open(readme_file) as f:
        long_description = f.read()
else:
    long_description = "Feature encoding and batch prediction for m6A RNA modification sites"

setup(
    name="m6a_predictor",
    version="0.1.0",
    description="Feature encoding and thresholded prediction for m6A RNA modification sites",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package discovery
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    # Dependencies
    install_requires=requirements,
    extras_require={
        'test': ['pytest>=7'],
    },

    # Python version
    python_requires=">=3.8",

    # Classifiers
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Programming Language :: Python :: 3",
    ],

    include_package_data=True,
    zip_safe=False,
)
