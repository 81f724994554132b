# setup.py
from setuptools import setup, find_packages
import codecs
import os

here = os.path.abspath(os.path.dirname(__file__))

with codecs.open(os.path.join(here, "README.md"), encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="PyDispatchTimer",
    version="0.1.0",
    author="Kris Kirby",
    author_email="ke4ahr@example.com",
    description="Cancellable, reschedulable timers with thread-safe invalidation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/ke4ahr/PyDispatchTimer",
    packages=find_packages(include=["pydispatchtimer", "pydispatchtimer.*"]),
    install_requires=[
        "async-timeout>=4.0"
    ],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU Lesser General Public License v3 or later (LGPLv3+)",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Libraries"
    ],
    python_requires=">=3.8",
    extras_require={
        "dev": ["pytest>=7.0", "twine>=4.0"],
        "test": ["pytest>=7.0"]
    },
    keywords=[
        "timer",
        "scheduler",
        "threading",
        "dispatch",
        "asyncio"
    ],
    project_urls={
        "Bug Tracker": "https://github.com/ke4ahr/PyDispatchTimer/issues",
        "Documentation": "https://github.com/ke4ahr/PyDispatchTimer/wiki"
    },
    license="LGPLv3.0"
)
