"""rtmp_exporter: Prometheus exporter for nginx_rtmp_module status pages."""

__version__ = "0.1.0"
