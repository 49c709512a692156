[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iqfft"
version = "0.1.0"
description = "Mixed-radix FFTs (complex, real, multi-dimensional, fixed-point), fast FIR filtering and IQ spectrogram processing in pure Python"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "fft",
    "dft",
    "signal processing",
    "fir",
    "convolution",
    "spectrogram",
    "iq",
    "sdr",
    "psd",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: Communications :: Ham Radio",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
iqfft-fft = "iqfft.fftutil:main"
iqfft-fastconv = "iqfft.fastfir:main"
iqfft-psdpng = "iqfft.psdpng:main"

[tool.hatch.build.targets.wheel]
packages = ["iqfft"]

[tool.hatch.build.targets.sdist]
include = ["iqfft", "tests", "README.md", "pyproject.toml"]

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
