"""HTTP service for the exchange."""
