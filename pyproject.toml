[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "endgamekit"
version = "0.1.0"
description = "Bitboards, a KPK bitbase and specialised chess endgame evaluation and scaling"
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "bitboard", "endgame", "bitbase", "evaluation"]
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
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["endgamekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
