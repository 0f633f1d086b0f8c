"""Study tool for the French citizenship exam (examen civique)."""

__version__ = "0.1.0"
