from importlib.machinery import SourceFileLoader
from pathlib import Path
from types import ModuleType

from setuptools import find_packages, setup


loader = SourceFileLoader("texpipe", "./src/texpipe/__init__.py")
texpipe = ModuleType(loader.name)
loader.exec_module(texpipe)

setup(
    name="texpipe",
    version=texpipe.__version__,  # type: ignore
    description="Compile LaTeX templates and data into PDF documents.",
    long_description=(Path(__file__).parent / "README.md").read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    python_requires=">=3.11",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    entry_points={"console_scripts": ["texpipe=texpipe.cli:main"]},
    install_requires=[
        "appdirs",
        "cyclopts>=4",
        "Jinja2>=3",
        "pydantic>=2",
        "PyYAML",
        "rich",
        "watchfiles",
    ],
    extras_require={"test": ["pdfminer.six", "pytest"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
