#!/usr/bin/python
# -*- encoding: utf-8 -*-
import ast
import re
import sys

from setuptools import find_packages
from setuptools import setup

## Keep the version number in one place only, as
## package.__version__
_version_re = re.compile(r"__version__\s+=\s+(.*)")
with open("schedulable/__init__.py", "rb") as f:
    version = str(
        ast.literal_eval(_version_re.search(f.read().decode("utf-8")).group(1))
    )

if __name__ == "__main__":
    test_packages = [
        "pytest",
        "pytest-coverage",
        "coverage",
        "pytz",
        "recurring-ical-events>=2.0.0",
    ]

    setup(
        name="schedulable",
        version=version,
        description="Resolve start, end, timezone and recurrence schedule of iCalendar components",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: Apache Software License",
            "Operating System :: OS Independent",
            "Programming Language :: Python",
            "Programming Language :: Python :: 3",
            "Topic :: Office/Business :: Scheduling",
            "Topic :: Software Development :: Libraries " ":: Python Modules",
        ],
        keywords="icalendar rrule timezone scheduling",
        license="Apache-2.0",
        packages=find_packages(exclude=["tests"]),
        include_package_data=True,
        zip_safe=False,
        python_requires=">=3.9",
        install_requires=[
            "icalendar>=6.0",
            "python-dateutil",
            "tzdata",
            "typing_extensions",
        ],
        extras_require={
            "test": test_packages,
        },
    )
