"""External aligner used when time-based alignment scores too low."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from srtalign.config import FALLBACK_ALIGNER, UPLUG_BIN


logger = logging.getLogger(__name__)

# (source file, target file) -> alignment text produced by the external tool
FallbackAligner = Callable[[str, str], str]


@dataclass
class UplugFallback:
    """Run ``uplug align/hun`` (length-based alignment) on a file pair."""
    executable: str = UPLUG_BIN
    aligner: str = FALLBACK_ALIGNER
    timeout: Optional[float] = None

    def command(self, source_file: str, target_file: str) -> List[str]:
        return [self.executable, self.aligner, "-src", source_file, "-trg", target_file]

    def is_available(self) -> bool:
        """True if the executable can be found on PATH or as a file."""
        return shutil.which(self.executable) is not None or Path(self.executable).is_file()

    def __call__(self, source_file: str, target_file: str) -> str:
        cmd = self.command(source_file, target_file)
        logger.warning("falling back to %s", " ".join(cmd))
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=self.timeout,
        )
        return result.stdout
