"""satnames: acquire 1sat.name identities from the terminal."""

__version__ = "0.1.0"
