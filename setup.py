from setuptools import setup, find_packages
from glob import glob

# Project metadata and dependencies live in pyproject.toml
setup(
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    data_files=[
        ("notibell/config", glob("config/*.json")),
    ],
)
