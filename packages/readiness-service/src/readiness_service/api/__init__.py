"""HTTP API: router and request / response schemas."""
