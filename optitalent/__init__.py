"""OptiTalent — multi-tenant HRMS backend."""

__version__ = "1.0.0"
