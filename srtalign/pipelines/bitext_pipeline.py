"""Bitext alignment pipeline.

This pipeline takes two subtitle files of the same movie, reads them as
sentence streams, looks up a bilingual dictionary, aligns the sentences and
writes the links as XCES or plain text.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from rich.console import Console
from rich.table import Table

from ..analysis.fallback import FallbackAligner, UplugFallback
from ..analysis.search import AlignmentConfig, align_bitext
from ..config import DICTIONARY_DIR
from ..export.ces import render_ces, render_links
from ..parsers.dictionary import load_language_dictionary, read_dictionary
from ..parsers.sentences import load_sentence_stream
from ..util.types import Dictionary, SentenceAlignment


logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("ces", "text")


@dataclass
class BitextAlignmentConfig:
    """Configuration for the bitext alignment pipeline."""
    source_file: str
    target_file: str
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None
    dictionary_file: Optional[str] = None
    dic_dir: Path = DICTIONARY_DIR
    alignment: AlignmentConfig = field(default_factory=AlignmentConfig)
    use_fallback: bool = False
    output_format: str = "ces"  # ces, text
    output_file: Optional[str] = None
    show_summary: bool = False


class BitextAlignmentPipeline:
    """Pipeline for aligning the sentences of two subtitle files."""

    def __init__(
        self,
        config: BitextAlignmentConfig,
        console: Optional[Console] = None,
        fallback: Optional[FallbackAligner] = None,
    ):
        if config.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {config.output_format}")
        self.config = config
        self.console = console or Console(stderr=True)
        self.fallback = fallback
        self.metadata: Dict[str, Any] = {}

    def run(self) -> Dict[str, Any]:
        """Run the complete alignment pipeline."""
        start_time = time.time()

        try:
            # Phase 1: Read both sides
            self._log_progress("Reading sentence streams...")
            source = load_sentence_stream(self.config.source_file, self.config.source_lang)
            target = load_sentence_stream(self.config.target_file, self.config.target_lang)
            self._log_progress(f"{len(source)} source / {len(target)} target sentences")

            # Phase 2: Lexical resources
            alignment_config = self.config.alignment
            dictionary, found_language_dictionary = self._load_dictionary()
            if found_language_dictionary and not alignment_config.best_align:
                logger.info("language dictionary found, switching to best-align")
                alignment_config = replace(alignment_config, best_align=True)

            # Phase 3: Align
            self._log_progress("Aligning sentences...")
            alignment, self.metadata = align_bitext(
                source, target, alignment_config,
                dictionary=dictionary,
                fallback=self._resolve_fallback(),
                metadata=self.metadata,
            )

            # Phase 4: Render and write
            output = self._render(alignment)
            self._write_output(output)

            if self.config.show_summary:
                self._output_summary()

            return {
                "output": output,
                "alignment": alignment,
                "metadata": self.metadata,
                "processing_time_seconds": round(time.time() - start_time, 3),
            }

        except Exception as e:
            self._log_error(f"Pipeline failed: {str(e)}")
            raise

    def _log_progress(self, message: str) -> None:
        """Log progress message."""
        if self.console:
            self.console.print(f"[blue]{message}[/blue]")

    def _log_error(self, message: str) -> None:
        """Log error message."""
        if self.console:
            self.console.print(f"[red]{message}[/red]")

    def _load_dictionary(self) -> Tuple[Optional[Dictionary], bool]:
        """Explicit dictionary file first, else a language-pair dictionary."""
        if self.config.dictionary_file:
            return read_dictionary(self.config.dictionary_file), False
        if self.config.source_lang and self.config.target_lang:
            dictionary = load_language_dictionary(
                self.config.source_lang, self.config.target_lang, self.config.dic_dir
            )
            return dictionary, dictionary is not None
        return None, False

    def _resolve_fallback(self) -> Optional[FallbackAligner]:
        if self.fallback is not None:
            return self.fallback
        if not self.config.use_fallback:
            return None
        uplug = UplugFallback()
        if not uplug.is_available():
            logger.warning("fallback aligner %s not found, fallback disabled", uplug.executable)
            return None
        return uplug

    def _render(self, alignment: SentenceAlignment) -> str:
        if alignment.delegated:
            return alignment.fallback_output or ""
        if self.config.output_format == "text":
            return render_links(alignment)
        return render_ces(self.config.source_file, self.config.target_file, alignment)

    def _write_output(self, output: str) -> None:
        if self.config.output_file:
            with open(self.config.output_file, "w", encoding="utf-8") as f:
                f.write(output)
            self._log_progress(f"Alignment written to {self.config.output_file}")
        else:
            sys.stdout.write(output)

    def _output_summary(self) -> None:
        """Print alignment statistics as a table."""
        stats = self.metadata.get("alignment", {})
        table = Table(title="Sentence Alignment")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Mode", str(stats.get("mode")))
        table.add_row("Sentences", f"{stats.get('source_sentences')} / {stats.get('target_sentences')}")
        table.add_row("Links", str(stats.get("links")))
        table.add_row("Empty / Non-empty", f"{stats.get('empty')} / {stats.get('nonempty')}")
        table.add_row("Ratio", f"{stats.get('ratio', 0.0):.4f}")
        for shape, count in sorted(stats.get("link_types", {}).items()):
            table.add_row(f"Links {shape}", str(count))
        if stats.get("delegated"):
            table.add_row("Fallback", "external aligner output")
        self.console.print(table)
