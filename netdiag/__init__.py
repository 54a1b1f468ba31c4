"""Network connectivity diagnostics: probing, statistics and remediation hints."""

__version__ = "0.1.0"
