"""Command-line interface for the collection point simulator."""
