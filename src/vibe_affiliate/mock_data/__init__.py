"""
vibe_affiliate.mock_data

In-memory mock data provider simulating the dashboard API.

Responsibilities:
- Seed fixtures for users, campaigns, conversions, links, payments and metrics.
- Async accessors/mutators with simulated network latency.
"""

from vibe_affiliate.mock_data.provider import (
    MockDataProvider,
    generate_chart_data,
    simulate_network_delay,
)

__all__ = ["MockDataProvider", "generate_chart_data", "simulate_network_delay"]
