[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sygma_relay"
version = "0.1.0"
description = "Bridge relayer core for EVM and Substrate chains: deposit decoding, proposal hashing, event handling and batching"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = ["bridge", "relayer", "evm", "substrate", "eip712", "cross-chain"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Internet",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sygma_relay"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
