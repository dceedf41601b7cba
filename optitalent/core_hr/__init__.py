"""Core HR module — Employee, Department, JobRole models, schemas and services."""

from optitalent.core_hr.models import Department, Employee, JobRole

__all__ = ["Employee", "Department", "JobRole"]
