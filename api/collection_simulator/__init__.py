"""QR collection point simulator."""

__version__ = "0.1.0"
