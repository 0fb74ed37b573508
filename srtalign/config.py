"""Project-level configuration for shared data and external tools.

Locations can be overridden via environment variables:
- SRTALIGN_SHARE_DIR: root of shared data (defaults to <project>/share)
- SRTALIGN_DIC_DIR: bilingual dictionaries named <src>-<trg> (defaults to <share>/dic)
- SRTALIGN_UPLUG: fallback aligner executable (defaults to "uplug")
- SRTALIGN_FALLBACK: aligner module passed to the executable (defaults to "align/hun")
"""

import os
from pathlib import Path
from typing import Final


def _project_root() -> Path:
	"""Return an approximation of the project root (parent of the package)."""
	return Path(__file__).resolve().parents[1]


SHARE_DIR: Final[Path] = Path(os.getenv("SRTALIGN_SHARE_DIR", _project_root() / "share"))
DICTIONARY_DIR: Final[Path] = Path(os.getenv("SRTALIGN_DIC_DIR", SHARE_DIR / "dic"))
UPLUG_BIN: Final[str] = os.getenv("SRTALIGN_UPLUG", "uplug")
FALLBACK_ALIGNER: Final[str] = os.getenv("SRTALIGN_FALLBACK", "align/hun")
