from setuptools import setup, find_packages

setup(
    name="redbot-ledger",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "python-dotenv>=1.0.0",
        "click>=8.1.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "redbot=redbot_ledger.cli:main",
        ],
    },
    python_requires=">=3.10",
)
