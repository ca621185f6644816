"""scriptnav - resolve npm scripts, binaries and module paths to their definitions."""

__version__ = "0.1.0"
