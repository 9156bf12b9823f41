[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "solapi"
version = "0.1.0"
description = "Small HTTP API that builds Solana instructions and signs or verifies messages"
requires-python = ">=3.10"
dependencies = [
    "pynacl",
]
keywords = ["solana", "ed25519", "spl-token", "http", "api", "base58"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
solapi = "solapi.server:main"

[tool.hatch.build.targets.wheel]
packages = ["solapi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
