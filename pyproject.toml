[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "degensurvivor"
version = "0.1.0"
description = "Rules engine for a five-round crypto price prediction game, with token vault, price oracle and prize distribution"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "prediction", "leaderboard", "prize-pool", "vault", "oracle"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["degensurvivor"]

[tool.pytest.ini_options]
addopts = "-ra"
