"""pie - Run Python scripts in isolated Docker containers."""

__version__ = "0.4.0"
