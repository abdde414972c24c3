"""Detail Dynamics CRM - vehicle-detailing customer and job management."""

__version__ = "0.1.0"
