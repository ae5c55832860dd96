"""Application layer - sources, services, workers and use cases."""
