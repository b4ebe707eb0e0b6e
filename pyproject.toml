[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "orderfoodonline"
version = "0.1.0"
description = "HTTP service for browsing a food product catalogue and placing orders, backed by MongoDB."
requires-python = ">=3.10"
keywords = ["food", "ordering", "catalogue", "coupons", "flask", "mongodb", "rest", "prometheus"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: Flask",
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
dependencies = [
    "flask",
    "pymongo",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["orderfoodonline"]

[tool.hatch.build.targets.sdist]
include = [
    "orderfoodonline",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
ignore_missing_imports = true
