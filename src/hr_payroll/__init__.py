"""HR payroll core: employee provisioning and payroll computation."""

__version__ = "0.1.0"
