"""Prometheus and Alertmanager providers for the OpsOrch alert/metric abstractions."""
