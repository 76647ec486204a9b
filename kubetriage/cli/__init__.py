"""kubetriage command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubetriage`` script).
"""

from kubetriage.cli.main import cli

__all__ = ["cli"]
