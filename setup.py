from setuptools import setup

setup(
    name        = "jlinear",
    version     = "1.0.0",
    author      = "theJ89",
    description = "theJ89's Linear Region Library",
    packages    = [ "jlinear" ],
    zip_safe    = True,
    python_requires  = ">=3.6",
    install_requires = [
        "zstandard>=0.18"
    ]
)
