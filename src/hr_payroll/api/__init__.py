"""HTTP adapter over the HR payroll core."""
