from setuptools import setup, find_packages

setup(
    name="bonita-application-packager",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={
        "bonita_packager.BUILDERS": ["resources/Dockerfile"],
    },
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "click>=8.0",
        "docker>=7.0",
        "requests>=2.26",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "black>=23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "bonita=bonita_packager.CLI.main:main",
        ],
    },
)
