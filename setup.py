# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="docrepo",
    version="0.1.0",
    description="Discover content files and assemble them into a navigable, mergeable document repository",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["docrepo", "docrepo.*"]),
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "docrepo=docrepo.interface.cli.app:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
