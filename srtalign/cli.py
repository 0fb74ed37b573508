"""srtalign CLI - Command-line interface for subtitle sentence alignment.

Primary Commands:
  - align: Align the sentences of two subtitle files (XCES or plain links)
  - anchors: Show the lexical anchor candidates found for a file pair
"""

from __future__ import annotations

import logging
import typer
from rich import print
from rich.table import Table

from .analysis.anchors import WINDOW_TOKEN_MODES, find_anchor_candidates, window_tokens
from .analysis.matching import LexicalMatcher, MatchConfig
from .analysis.search import AlignmentConfig
from .analysis.timing import set_sentence_times
from .parsers.dictionary import load_language_dictionary, read_dictionary
from .parsers.sentences import load_sentence_stream
from .pipelines import BitextAlignmentConfig, BitextAlignmentPipeline
from .pipelines.bitext_pipeline import OUTPUT_FORMATS


# Warnings only by default; --verbose lowers the srtalign loggers to DEBUG
logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _set_verbose(verbose: bool) -> None:
	if verbose:
		logging.getLogger("srtalign").setLevel(logging.DEBUG)


def _match_config(
	identical: int | None,
	token_min_length: int | None,
	char_set: str | None,
	upper_case: bool,
	word_freq: bool,
	cognates: float | None,
	cognate_min_length: int,
) -> MatchConfig:
	if cognates is not None and not 0.0 < cognates <= 1.0:
		raise typer.BadParameter(f"--cognates must be in (0, 1]: {cognates}")
	return MatchConfig(
		identical_min_length=identical,
		token_min_length=token_min_length,
		char_set=char_set,
		upper_case=upper_case,
		use_word_freq=word_freq,
		cognate_threshold=cognates,
		cognate_min_length=cognate_min_length,
	)


@app.command(name="align")
def align_cmd(
	source_file: str = typer.Argument(..., help="Source language file (.xml/.xml.gz/.srt/.vtt/.ass)"),
	target_file: str = typer.Argument(..., help="Target language file (.xml/.xml.gz/.srt/.vtt/.ass)"),
	source_lang: str | None = typer.Option(None, "--source-lang", help="Source language code, e.g. en, eng"),
	target_lang: str | None = typer.Option(None, "--target-lang", help="Target language code, e.g. sv, swe"),
	dictionary: str | None = typer.Option(None, "--dictionary", help="Bilingual dictionary file (source target per line)"),
	identical: int | None = typer.Option(None, "--identical", help="Match identical tokens longer than this many characters"),
	token_min_length: int | None = typer.Option(None, "--token-min-length", help="Ignore identical tokens shorter than this"),
	char_set: str | None = typer.Option(None, "--char-set", help=r"Only match tokens of this character class, e.g. \p{L}"),
	upper_case: bool = typer.Option(False, "--upper-case", help="Only match tokens starting with an upper-case letter"),
	word_freq: bool = typer.Option(False, "--word-freq", help="Weight identical matches by inverse word frequency"),
	cognates: float | None = typer.Option(None, "--cognates", help="Match cognates with LCSR >= this threshold (0..1)"),
	cognate_min_length: int = typer.Option(5, "--cognate-min-length", help="Minimal cognate length"),
	cognate_range: float | None = typer.Option(None, "--cognate-range", help="Search cognate thresholds from 1.0 down to this value"),
	best_align: bool = typer.Option(False, "--best-align", help="Try all anchor combinations and keep the best"),
	window: int = typer.Option(25, "--window", help="Number of sentences searched for anchors at each end"),
	max_matches: int | None = typer.Option(None, "--max-matches", help="Use at most this many anchors per window"),
	window_tokens_mode: str = typer.Option("last", "--window-tokens", help="Tokens used per window sentence: last|all"),
	hard_boundaries: str | None = typer.Option(None, "--hard-boundaries", help="Fixed links 'srcid:trgid+srcid:trgid'"),
	fallback: bool = typer.Option(False, "--fallback/--no-fallback", help="Use the external aligner for low-scoring pairs"),
	output_format: str = typer.Option("ces", "--format", help="Output format: ces|text"),
	out: str | None = typer.Option(None, "--out", help="Write the alignment to this file instead of stdout"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
	summary: bool = typer.Option(False, "--summary", help="Print alignment statistics"),
) -> None:
	"""Align the sentences of two subtitle files using their time information."""
	_set_verbose(verbose)
	if output_format not in OUTPUT_FORMATS:
		raise typer.BadParameter(f"--format must be one of {', '.join(OUTPUT_FORMATS)}")
	if window_tokens_mode not in WINDOW_TOKEN_MODES:
		raise typer.BadParameter(f"--window-tokens must be one of {', '.join(WINDOW_TOKEN_MODES)}")
	if window < 1:
		raise typer.BadParameter("--window must be positive")
	if cognate_range is not None and not 0.0 <= cognate_range < 1.0:
		raise typer.BadParameter(f"--cognate-range must be in [0, 1): {cognate_range}")

	match = _match_config(identical, token_min_length, char_set, upper_case, word_freq, cognates, cognate_min_length)
	alignment = AlignmentConfig(
		window=window,
		max_matches=max_matches,
		best_align=best_align,
		cognate_range=cognate_range,
		window_tokens=window_tokens_mode,
		hard_boundaries=hard_boundaries,
		match=match,
	)
	config = BitextAlignmentConfig(
		source_file=source_file,
		target_file=target_file,
		source_lang=source_lang,
		target_lang=target_lang,
		dictionary_file=dictionary,
		alignment=alignment,
		use_fallback=fallback,
		output_format=output_format,
		output_file=out,
		show_summary=summary,
	)
	try:
		BitextAlignmentPipeline(config).run()
	except (FileNotFoundError, ValueError) as e:
		raise typer.BadParameter(str(e))


@app.command(name="anchors")
def anchors_cmd(
	source_file: str = typer.Argument(..., help="Source language file"),
	target_file: str = typer.Argument(..., help="Target language file"),
	source_lang: str | None = typer.Option(None, "--source-lang", help="Source language code"),
	target_lang: str | None = typer.Option(None, "--target-lang", help="Target language code"),
	dictionary: str | None = typer.Option(None, "--dictionary", help="Bilingual dictionary file"),
	identical: int | None = typer.Option(None, "--identical", help="Match identical tokens longer than this"),
	upper_case: bool = typer.Option(False, "--upper-case", help="Only match capitalised tokens"),
	cognates: float | None = typer.Option(None, "--cognates", help="Cognate LCSR threshold (0..1)"),
	window: int = typer.Option(25, "--window", help="Sentences searched at each end"),
	window_tokens_mode: str = typer.Option("last", "--window-tokens", help="last|all"),
	limit: int = typer.Option(10, "--limit", help="Rows shown per window"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
	"""Show the ranked anchor candidates at the start and end of a file pair."""
	_set_verbose(verbose)
	if window_tokens_mode not in WINDOW_TOKEN_MODES:
		raise typer.BadParameter(f"--window-tokens must be one of {', '.join(WINDOW_TOKEN_MODES)}")
	try:
		source = load_sentence_stream(source_file, source_lang)
		target = load_sentence_stream(target_file, target_lang)
		dic = None
		if dictionary:
			dic = read_dictionary(dictionary)
		elif source_lang and target_lang:
			dic = load_language_dictionary(source_lang, target_lang)
	except (FileNotFoundError, ValueError) as e:
		raise typer.BadParameter(str(e))

	set_sentence_times(source.sentences)
	set_sentence_times(target.sentences)
	match = _match_config(identical, None, None, upper_case, False, cognates, 5)
	matcher = LexicalMatcher(match, dic, source.word_freq, target.word_freq)
	candidates = find_anchor_candidates(source, target, matcher, window=window, window_mode=window_tokens_mode)

	for which, scores in (("first", candidates.first), ("last", candidates.last)):
		table = Table(title=f"Anchor candidates ({which} {window} sentences)")
		for col in ["src", "trg", "score", "src time", "trg time", "src tokens", "trg tokens"]:
			table.add_column(col)
		for s, t in candidates.ranked(which, limit):
			src, trg = source.sentences[s], target.sentences[t]
			table.add_row(
				src.id,
				trg.id,
				f"{scores[(s, t)]:.4f}",
				f"{src.end:.2f}",
				f"{trg.end:.2f}",
				" ".join(window_tokens(src, window_tokens_mode)),
				" ".join(window_tokens(trg, window_tokens_mode)),
			)
		print(table)


if __name__ == "__main__":
	app()
