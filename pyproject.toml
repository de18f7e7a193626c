[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "uhpspectrum"
version = "0.1.0"
description = "Live spectrum viewer and control-protocol toolkit for HF receivers driven over Ethernet"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["hf", "receiver", "spectrum", "iq", "fft", "sdr", "protocol"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
uhpspectrum = "uhpspectrum.app:main"

[tool.hatch.build.targets.wheel]
packages = ["uhpspectrum"]

[tool.pytest.ini_options]
addopts = "-ra"
