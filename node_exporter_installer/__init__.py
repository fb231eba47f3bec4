"""Install and remove the Prometheus Node Exporter on Linux hosts."""

__version__ = "0.1.0"
