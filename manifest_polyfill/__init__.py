"""manifest_polyfill: patch launcher version manifests.

Backfills missing server downloads from the server archive index and swaps
legacy LWJGL 2 libraries for the maintained fork, hashing every replacement
artifact once per run.
"""

__version__ = "0.1.0"
__description__ = "Polyfill launcher version manifests with server jars and a patched LWJGL 2"

from manifest_polyfill.cli.app import app as cli
from manifest_polyfill.core.orchestrator import VersionPatchOrchestrator

__all__ = ["VersionPatchOrchestrator", "cli", "__version__"]
