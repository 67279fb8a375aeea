from pathlib import Path

from setuptools import find_namespace_packages, setup

README_PATH = Path(__file__).parent.resolve() / "README.md"
with README_PATH.open() as readme_file:
    README = readme_file.read()

setup(
    name="mqt.qmrl",
    author="Chair for Design Automation, TUM",
    description="Specialized solvers for Qubit Mapping and Routing on declaratively specified architectures",
    long_description=README,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    license="MIT",
    zip_safe=False,
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["mqt.*"]),
    install_requires=["qiskit>=1.0", "rustworkx>=0.13", "networkx>=2.5", "pyyaml>=6.0", "pydantic>=2.0"],
    extras_require={
        "test": ["pytest>=7.2"],
        "coverage": ["coverage[toml]>=6.5", "pytest-cov>=4"],
        "dev": ["mqt.qmrl[test, coverage]"],  # requires Pip 21.2 or newer
    },
    entry_points={"console_scripts": ["qmrl = mqt.qmrl.cli:main"]},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "License :: OSI Approved :: MIT License",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: MacOS",
        "Operating System :: POSIX :: Linux",
        "Intended Audience :: Science/Research",
        "Natural Language :: English",
        "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
    ],
    keywords="MQT quantum compilation mapping routing",
)
