"""
python -m build
twine upload dist/*
"""

from setuptools import setup, find_packages


def nodeattr_setup():
    with open("requirements.txt", "rt") as fp:
        install_requires = fp.read().strip().split("\n")

    version = "1.0.0"

    setup(
        name="nodeattr-server",
        packages=find_packages(exclude=["tests", "tests.*", "examples"]),
        version=version,
        license="EPL-2.0",
        description="nodeattr-server : json:api inventory of clusters, groups and nodes",
        long_description=open("README.rst").read(),
        keywords=["SqlAlchemy", "Flask", "REST", "JsonAPI", "JWT"],
        python_requires=">=3.8, <4",
        install_requires=install_requires,
        classifiers=[
            "Development Status :: 3 - Alpha",
            "Intended Audience :: System Administrators",
            "Framework :: Flask",
            "Environment :: Web Environment",
            "Programming Language :: Python :: 3",
        ],
        extras_require={"test": ["pytest>=7.0"]},
    )


nodeattr_setup()  # pragma: no cover
