"""Entry point for `python -m kubetriage`.

Usage:
    python -m kubetriage          (configuration from KUBETRIAGE_* variables)
    kubetriage run --sink-dsn ... (see kubetriage.cli)
"""

from __future__ import annotations

import asyncio

from kubetriage.app import main

asyncio.run(main())
