"""doccov: API-surface extraction, documentation drift and spec diffing for TypeScript packages."""

__version__ = "0.1.0"
