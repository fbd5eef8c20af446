[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "espflash"
version = "0.1.0"
description = "Serial port selection, SLIP framing, configuration and monitor tooling for ESP32-family devices"
requires-python = ">=3.11"
keywords = ["esp32", "serial", "slip", "monitor", "defmt", "configuration"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Terminals :: Serial",
]
dependencies = [
    "pyserial",
    "tomli-w",
    "tqdm",
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["espflash"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
