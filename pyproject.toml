[build-system]
requires = ["hatchling>=1.18"]
build-backend = "hatchling.build"

[project]
name = "key2port"
version = "0.1.0"
description = "Single packet authorization: signed UDP packets that ask for a firewall port to be opened"
requires-python = ">=3.10"
dependencies = [
    "pynacl>=1.5",
]
keywords = [
    "spa",
    "single-packet-authorization",
    "port-knocking",
    "ed25519",
    "nftables",
    "firewall",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: System :: Networking :: Firewalls",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[project.scripts]
k2p-client = "key2port.client:main"

[tool.hatch.build.targets.wheel]
packages = ["key2port"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
