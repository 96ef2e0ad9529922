[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "khcore"
version = "2.5.0"
description = "Core building blocks for Kubernetes synthetic health checks: workload state, Prometheus metrics, master election and check logic over plain data."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kubernetes",
    "health-check",
    "monitoring",
    "prometheus",
    "synthetic-checks",
]
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
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
khcore-crdgen = "khcore.crdgen:main"

[tool.hatch.build.targets.wheel]
packages = ["khcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
