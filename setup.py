"""
Setup script for controlbyweb-python library.
"""

from setuptools import setup, find_packages

# Read the README file
def read_readme():
    with open("README.md", "r", encoding="utf-8") as fh:
        return fh.read()

# Read requirements
def read_requirements():
    with open("requirements.txt", "r", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="controlbyweb",
    version="0.1.0",
    author="Simon Wright",
    description="Asyncio client for ControlByWeb relay, switch and temperature modules, written in Python.",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["controlbyweb", "controlbyweb.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU Lesser General Public License v2.1 (LGPLv2.1)",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Home Automation",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.11",
    install_requires=read_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.18.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "controlbyweb-poll=controlbyweb.cli:main",
        ],
    },
    include_package_data=True,
    package_data={
        "controlbyweb": ["py.typed"],
    },
    zip_safe=False,
)
