[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "seriesformula"
version = "0.1.0"
description = "Evaluate indicator formulas (MA, REF, HHV, LLV) over price time series"
requires-python = ">=3.10"
dependencies = []
keywords = ["formula", "indicator", "time series", "moving average", "trading"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
seriesformula = "seriesformula.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["seriesformula"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
