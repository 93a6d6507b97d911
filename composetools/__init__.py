"""Progress reporting, log printing, registry stream decoding and test helpers for container tooling."""

__version__ = "0.1.0"