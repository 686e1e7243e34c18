"""skein - package manager CLI plugin tooling."""

__version__ = "4.0.0"
