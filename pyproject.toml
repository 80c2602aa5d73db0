[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metricutil"
version = "0.1.0"
description = "Building blocks for metrics recorders: registries, buckets, histograms, quantiles and composable layers."
requires-python = ">=3.10"
dependencies = []
keywords = ["metrics", "monitoring", "telemetry", "histogram", "registry", "recorder"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["metricutil"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
