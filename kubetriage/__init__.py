"""kubetriage: turns the Kubernetes event stream into fingerprinted alerts."""

__version__ = "0.1.0"
