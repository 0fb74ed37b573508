"""Readers that turn subtitle files into sentence streams.

Two kinds of input are supported:

- sentence-split XML as distributed with OPUS OpenSubtitles (``<s>`` sentences
  of ``<w>`` tokens, interleaved with ``<time>`` frame markers), plain or gzip
- raw cue files (SRT/VTT/ASS), where every non-empty cue becomes a sentence
"""

from __future__ import annotations

import gzip
import logging
from collections import Counter
from pathlib import Path
from typing import List, Optional, Sequence, Union

from bs4 import BeautifulSoup

from srtalign.analysis.normalization import NormalizationConfig, normalize_cue_text, tokenize_text
from srtalign.analysis.timing import time_to_seconds
from srtalign.parsers.subtitles import SUBTITLE_EXTENSIONS, Segment, parse_subtitle_bytes
from srtalign.util.types import Sentence, SentenceStream


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_bytes(path: Path) -> bytes:
	"""Read a file, transparently decompressing ``.gz``."""
	data = path.read_bytes()
	if path.suffix == ".gz":
		data = gzip.decompress(data)
	return data


def _resolve_path(path: PathLike) -> Path:
	"""Return ``path``, or ``path.gz`` if only the compressed file exists."""
	p = Path(path)
	if p.exists():
		return p
	gz = p.with_name(p.name + ".gz")
	if gz.exists():
		logger.debug("%s not found, reading %s", p, gz)
		return gz
	raise FileNotFoundError(f"Sentence file not found: {p}")


def parse_sentence_xml(data: Union[bytes, str], source_file: str = "") -> SentenceStream:
	"""Parse sentence-split subtitle XML.

	Character positions only count token characters. A ``<time>`` marker is
	recorded as ``first`` if it is the first one in the sentence, otherwise
	as ``last`` when it sits after the ``first`` position. Markers between
	sentences belong to the preceding sentence.

	Example:
		<s id="1"><time id="T1S" value="00:00:01,000"/><w>Hi</w>
		<time id="T1E" value="00:00:02,000"/></s>
		-> Sentence(id="1", first=1.0, first_pos=0, last=2.0, last_pos=2)
	"""
	soup = BeautifulSoup(data, "html.parser")
	sentences: List[Sentence] = []
	tokens: List[str] = []
	word_freq: Counter = Counter()
	pos = 0

	def close_current() -> None:
		if sentences:
			sentences[-1].end_pos = pos
			sentences[-1].tokens = tuple(tokens)

	for element in soup.find_all(["s", "w", "time"]):
		if element.name == "s":
			close_current()
			tokens = []
			sent_id = element.get("id") or f"s{len(sentences) + 1}"
			sentences.append(Sentence(id=sent_id, index=len(sentences), start_pos=pos))
		elif element.name == "w":
			word = element.get_text()
			pos += len(word)
			if sentences:
				tokens.append(word)
			word_freq[word] += 1
		elif sentences:
			value = element.get("value")
			seconds = time_to_seconds(value)
			if seconds is None:
				logger.warning("%s: no time value found in %s", source_file or "<xml>", element)
				continue
			current = sentences[-1]
			if current.first is None:
				current.first, current.first_pos = seconds, pos
			elif pos > current.first_pos:
				current.last, current.last_pos = seconds, pos

	close_current()
	logger.info("%s: read %d sentences", source_file or "<xml>", len(sentences))
	return SentenceStream(source_file=source_file, sentences=sentences, word_freq=word_freq)


def read_sentence_stream(path: PathLike, language: Optional[str] = None) -> SentenceStream:
	"""Read a sentence-split XML file (``.xml`` or ``.xml.gz``)."""
	resolved = _resolve_path(path)
	stream = parse_sentence_xml(_read_bytes(resolved), source_file=str(path))
	stream.language = language
	return stream


def sentences_from_segments(
	segments: Sequence[Segment],
	source_file: str = "",
	config: NormalizationConfig = NormalizationConfig(),
) -> SentenceStream:
	"""Turn subtitle cues into a stream with one sentence per non-empty cue.

	The cue start time is placed at the first character of the sentence and
	the end time at its last, so time synthesis keeps the cue timing.
	"""
	sentences: List[Sentence] = []
	word_freq: Counter = Counter()
	pos = 0
	for seg in segments:
		words = tokenize_text(normalize_cue_text(seg.text, config))
		if not words:
			continue
		start_pos = pos
		pos += sum(len(w) for w in words)
		word_freq.update(words)
		sentences.append(Sentence(
			id=f"s{len(sentences) + 1}",
			index=len(sentences),
			start_pos=start_pos,
			end_pos=pos,
			tokens=tuple(words),
			first=seg.start_seconds,
			first_pos=start_pos,
			last=seg.end_seconds,
			last_pos=pos,
		))
	return SentenceStream(source_file=source_file, sentences=sentences, word_freq=word_freq)


def _subtitle_extension(path: Path) -> Optional[str]:
	suffixes = [s.lstrip(".").lower() for s in path.suffixes]
	if suffixes and suffixes[-1] == "gz":
		suffixes = suffixes[:-1]
	if suffixes and suffixes[-1] in SUBTITLE_EXTENSIONS:
		return suffixes[-1]
	return None


def load_sentence_stream(path: PathLike, language: Optional[str] = None) -> SentenceStream:
	"""Load a stream from sentence XML or a raw subtitle file, by extension."""
	resolved = _resolve_path(path)
	ext = _subtitle_extension(resolved)
	if ext is None:
		return read_sentence_stream(resolved, language)
	segments = parse_subtitle_bytes(_read_bytes(resolved), ext)
	stream = sentences_from_segments(segments, source_file=str(path))
	stream.language = language
	logger.info("%s: %d cues -> %d sentences", path, len(segments), len(stream))
	return stream
