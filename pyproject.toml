[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dnxtool"
version = "0.1.0"
description = "Firmware image inspection and payload helpers for the Intel DnX (Download and Execute) recovery protocol"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "dnx",
    "ifwi",
    "firmware",
    "recovery",
    "medfield",
    "merrifield",
    "fuph",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Recovery Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dnx = "dnxtool.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dnxtool"]

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
