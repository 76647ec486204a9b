"""Logging and metrics for kubetriage."""
