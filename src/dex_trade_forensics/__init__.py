"""DEX Trade Forensics - heuristic manipulation analysis of token trade logs."""

__version__ = "0.1.0"
