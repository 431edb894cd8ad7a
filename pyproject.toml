[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "golbat"
version = "0.1.0"
description = "Building blocks for a scan data collector: geofences, webhooks, metrics, device tracking and raw proto intake"
requires-python = ">=3.10"
dependencies = []
keywords = ["geofence", "geojson", "webhooks", "metrics", "prometheus", "ttl-cache"]
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
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["golbat"]

[tool.pytest.ini_options]
addopts = "-ra"
