[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yaskkserv2"
version = "0.1.0"
description = "SKK dictionary building blocks: EUC-JIS-2004/UTF-8 conversion, candidate handling and binary dictionary index loading"
requires-python = ">=3.10"
dependencies = []
keywords = ["skk", "japanese", "input-method", "euc-jis-2004", "euc-jp", "dictionary", "jisyo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Natural Language :: Japanese",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Linguistic",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["yaskkserv2"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
