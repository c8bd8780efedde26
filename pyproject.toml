[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sensorgw"
version = "0.1.0"
description = "Sensor gateway: collects temperature readings from TCP sensor nodes, tracks running averages per room and stores readings to CSV"
requires-python = ">=3.10"
dependencies = []
keywords = ["sensor", "gateway", "temperature", "monitoring", "tcp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
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
test = ["pytest"]

[project.scripts]
sensorgw-gateway = "sensorgw.gateway:main"
sensorgw-node = "sensorgw.sensor_node:main"
sensorgw-files = "sensorgw.file_creator:main"

[tool.hatch.build.targets.wheel]
packages = ["sensorgw"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
