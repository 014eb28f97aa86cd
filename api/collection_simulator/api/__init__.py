"""HTTP API for the collection point simulator."""
