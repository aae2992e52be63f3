import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="gendeb",
    version="0.0.1",
    author="Gianluca Pacchiella",
    author_email="gp@ktln2.org",
    description="Debian binary packages from a declarative specification",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/gipi/gendeb",
    packages=setuptools.find_packages(exclude=['tests']),
    scripts=[
        'scripts/gendeb.py',
        'scripts/debinfo.py',
    ],
    install_requires=[
        'bitstring<5',
    ],
    extras_require={
        'tests': ['pytest'],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GPLv2 License",
        "Operating System :: OS Independent",
    ],
)
