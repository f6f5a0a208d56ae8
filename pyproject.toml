[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "toggle"
version = "0.1.0"
description = "Feature flag management: tenant-scoped flag storage, rule-based evaluation and percentage rollouts behind Flask views"
requires-python = ">=3.10"
keywords = [
    "feature-flags",
    "feature-toggles",
    "rollout",
    "flask",
    "multi-tenant",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: Flask",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "flask>=2.2",
    "python-dotenv>=1.0",
    "python-slugify>=8.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["toggle"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
