"""Signal radar service: market data, persistence, alerts and HTTP API."""
