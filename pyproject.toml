[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "healthprobe"
version = "0.1.0"
description = "Endpoint health evaluation: conditions, JSON paths, glob patterns, DNS queries and endpoint configuration."
requires-python = ">=3.10"
dependencies = [
    "dnspython",
]
keywords = ["monitoring", "health-check", "uptime", "conditions", "dns"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["healthprobe"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
