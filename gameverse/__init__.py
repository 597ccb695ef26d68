"""GameVerse core: progress, achievements and the voice buddy."""

from gameverse.version import CURRENT_VERSION as __version__
