from setuptools import find_packages, setup
from version import get_version

# use the configured version, or the PACKAGE_VERSION override, as build version
build_version = get_version()

# use the contents of the README file as the 'long description' for the package
with open("./README.md", "r") as fh:
    long_description = fh.read()

#
# build the package
#
setup(
    name="periodic-records",
    version=build_version,
    description="Non-overlapping validity periods for record timelines",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where=".", include=["periodic", "periodic.*"]),
    py_modules=["version"],
    python_requires=">=3.8",
    install_requires=["pandas<3", "numpy", "pyspark"],
    extras_require=dict(tests=["pytest", "chispa"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
