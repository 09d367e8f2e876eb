"""Configuration de la journalisation pour Repasse Auto.

Configure le logging standard Python avec un handler console.
"""

import logging
import sys


def setup_logging(log_level: str = "INFO") -> None:
    """Configure le logger racine de l'application."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # googleapiclient est tres bavard en DEBUG (discovery, cache)
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
