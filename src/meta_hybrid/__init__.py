"""meta-hybrid: hybrid mount layout installer and overlay status reporting."""

__version__ = "1.0.0"
