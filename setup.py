""" btcblind build script for setuptools.

"""

from setuptools import find_packages, setup  # type: ignore

import btcblind

with open("README.md", "r", encoding="ascii") as file_:
    longdescription = file_.read()

setup(
    name=btcblind.name,
    version=btcblind.__version__,
    license=btcblind.__license__,
    author=btcblind.__author__,
    author_email=btcblind.__author_email__,
    description="Blind ECDSA signatures with BIP32 derived blinding factors",
    long_description=longdescription,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=["btclib>=2023.2.3,<2024"],
    extras_require={
        "secp256k1": ["btclib_libsecp256k1"],
        "test": ["pytest"],
        "docs": ["sphinx", "sphinx_rtd_theme", "myst_parser"],
    },
    keywords=(
        "bitcoin cryptography elliptic-curves ecdsa blind-signature "
        "bip32 custody privacy"
    ),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
