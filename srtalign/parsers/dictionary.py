"""Bilingual dictionaries used as a lexical anchor source.

A dictionary file holds one ``source target`` pair per line (whitespace
separated, optionally gzip compressed). Language-pair dictionaries live in
``DICTIONARY_DIR`` and are named with ISO 639-3 codes, e.g. ``eng-swe``.
"""

from __future__ import annotations

import gzip
import logging
from collections import Counter, defaultdict
from pathlib import Path
from typing import Optional, Union

import babelfish  # type: ignore
from babelfish import Language  # type: ignore

from srtalign.config import DICTIONARY_DIR
from srtalign.util.types import Dictionary


logger = logging.getLogger(__name__)


def read_dictionary(
	path: Union[str, Path],
	inverse: bool = False,
	dictionary: Optional[Dictionary] = None,
) -> Dictionary:
	"""Read word pairs into ``dictionary`` (a new one if not given).

	With ``inverse`` the pairs are read as ``target source``.
	"""
	p = Path(path)
	if not p.is_file():
		raise FileNotFoundError(f"Dictionary file not found: {p}")
	if dictionary is None:
		dictionary = defaultdict(Counter)

	opener = gzip.open if p.suffix == ".gz" else open
	pairs = 0
	with opener(p, "rt", encoding="utf-8") as f:
		for line in f:
			fields = line.split()
			if len(fields) < 2:
				continue
			src, trg = fields[0], fields[1]
			if inverse:
				src, trg = trg, src
			dictionary.setdefault(src, Counter())[trg] += 1
			pairs += 1
	logger.info("read %d dictionary pairs from %s%s", pairs, p, " (inverse)" if inverse else "")
	return dictionary


def to_alpha3(code: str) -> Optional[str]:
	"""Normalise a language code ('en', 'en-US', 'eng') to ISO 639-3, or None."""
	try:
		return Language.fromietf(code).alpha3
	except (ValueError, KeyError, babelfish.Error):
		pass
	try:
		return Language(code).alpha3
	except (ValueError, KeyError, babelfish.Error):
		logger.warning("unknown language code: %s", code)
		return None


def _find_file(dic_dir: Path, name: str) -> Optional[Path]:
	for candidate in (dic_dir / name, dic_dir / f"{name}.gz"):
		if candidate.is_file():
			return candidate
	return None


def load_language_dictionary(
	src_lang: str,
	trg_lang: str,
	dic_dir: Union[str, Path] = DICTIONARY_DIR,
) -> Optional[Dictionary]:
	"""Load ``<src>-<trg>`` and the inverted ``<trg>-<src>`` from ``dic_dir``.

	Returns None when neither file exists.
	"""
	src, trg = to_alpha3(src_lang), to_alpha3(trg_lang)
	if src is None or trg is None:
		return None
	dic_dir = Path(dic_dir)
	dictionary: Optional[Dictionary] = None

	forward = _find_file(dic_dir, f"{src}-{trg}")
	if forward is not None:
		dictionary = read_dictionary(forward, dictionary=dictionary)
	backward = _find_file(dic_dir, f"{trg}-{src}")
	if backward is not None:
		dictionary = read_dictionary(backward, inverse=True, dictionary=dictionary)

	if dictionary is None:
		logger.debug("no dictionary for %s-%s in %s", src, trg, dic_dir)
	return dictionary
