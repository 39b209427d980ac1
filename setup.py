from setuptools import setup, find_packages

setup(
    name="bosh-bootloader",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "boto3",
        "botocore",
        "click<8.4",
        "cryptography",
        "pydantic>=2",
        "PyYAML",
        "rich",
        "typer",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["bbl=bbl.cli:main"]},
)
