[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blocktex"
version = "0.1.0"
description = "Pure-Python decoders for block-compressed GPU texture formats (BCn, ATC, ASTC)."
requires-python = ">=3.10"
dependencies = []
keywords = ["texture", "decoder", "bc1", "bc7", "bc6h", "dxt", "astc", "atc", "gpu"]
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
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["blocktex"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
