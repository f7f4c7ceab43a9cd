"""batou components to mount NFS exports on machines at first boot.
"""

import os.path

from setuptools import find_packages, setup


def project_path(*names):
    return os.path.join(*names)


setup(
    name="batou_mount",
    version="0.1.0",
    install_requires=[
        "batou >= 2.3b4",
        "boto3",
        "pyaml",
        "setuptools",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
            "PyYAML",
        ],
    },
    author="Flying Circus <support@flyingcircus.io>",
    author_email="support@flyingcircus.io",
    license="BSD (2-clause)",
    keywords="deployment nfs",
    classifiers="""\
License :: OSI Approved :: BSD License
Programming Language :: Python
Programming Language :: Python :: 3
Programming Language :: Python :: 3 :: Only
"""[
        :-1
    ].split(
        "\n"
    ),
    description=__doc__.strip(),
    long_description="\n\n".join(
        open(project_path(name)).read()
        for name in (
            "README.md",
            "CHANGES.md",
        )
    ),
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    package_data={"batou_mount": ["resources/bash/*.sh"]},
    include_package_data=True,
    zip_safe=False,
)
