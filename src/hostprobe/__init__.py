"""hostprobe: host-resident OS metrics probe."""

__version__ = "0.1.0"
