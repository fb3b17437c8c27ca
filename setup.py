import site
import sys
from setuptools import setup

# workaround bug https://github.com/pypa/pip/issues/7953
site.ENABLE_USER_SITE = "--user" in sys.argv[1:]

setup(
    name="tpm12-auth",
    use_scm_version={"fallback_version": "0.1.0"},
    description="TPM 1.2 authorization session HMAC generation and verification",
    license="BSD-2-Clause",
    python_requires=">=3.7",
    packages=["tpm12_auth", "tpm12_auth.internal"],
    package_data={"tpm12_auth": ["config.json"]},
    install_requires=["cryptography>=3.0"],
    extras_require={"dev": ["pytest", "pytest-cov"]},
)
