"""Sensor gateway: TCP sensor nodes, running averages per room and CSV storage."""

__version__ = "0.1.0"