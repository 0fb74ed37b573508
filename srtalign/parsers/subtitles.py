"""Subtitle cue parsers for common formats (SRT, VTT, ASS).

Cues are returned as plain timed text segments; turning them into sentences
is done by ``srtalign.parsers.sentences``. Subtitles for different languages
come in all kinds of legacy encodings, so bytes are decoded with a detected
encoding before parsing.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import List, Optional

import chardet  # type: ignore
import pysubs2
import srt
import webvtt


logger = logging.getLogger(__name__)

SUBTITLE_EXTENSIONS = ("srt", "vtt", "ass", "ssa")


@dataclass
class Segment:
	start_seconds: float
	end_seconds: float
	text: str


def decode_subtitle_bytes(data: bytes) -> str:
	"""Decode subtitle bytes: UTF-8 first, then the encoding chardet detects."""
	try:
		text = data.decode("utf-8")
	except UnicodeDecodeError:
		detected = chardet.detect(data)
		encoding = detected.get("encoding") or "utf-8"
		logger.info("detected encoding %s (confidence %.2f)", encoding, detected.get("confidence") or 0.0)
		try:
			text = data.decode(encoding)
		except (UnicodeDecodeError, LookupError):
			logger.warning("failed to decode with %s, replacing invalid characters", encoding)
			text = data.decode("utf-8", errors="replace")
	if text.startswith("\ufeff"):
		text = text[1:]
	return text


def parse_srt_bytes(data: bytes) -> List[Segment]:
	"""Parse SRT bytes into segments, skipping cues without text."""
	text_content = decode_subtitle_bytes(data)
	segments: List[Segment] = []
	try:
		for item in srt.parse(text_content):
			text = (item.content or "").replace("\n", " ").strip()
			if text:
				segments.append(Segment(item.start.total_seconds(), item.end.total_seconds(), text))
	except srt.SRTParseError:
		logger.warning("malformed SRT, parsing leniently")
		segments = _parse_srt_leniently(text_content)
	return segments


def _parse_srt_leniently(content: str) -> List[Segment]:
	"""Collect ``start --> end`` blocks, ignoring anything that does not parse."""
	segments: List[Segment] = []
	for block in content.replace("\r\n", "\n").split("\n\n"):
		lines = [line.strip() for line in block.strip().split("\n") if line.strip()]
		timing_idx = next((i for i, line in enumerate(lines) if "-->" in line), None)
		if timing_idx is None:
			continue
		start_str, _, end_str = lines[timing_idx].partition("-->")
		start = _parse_timestamp(start_str.strip())
		end = _parse_timestamp(end_str.strip().split(" ")[0])
		text = " ".join(lines[timing_idx + 1:])
		if start is None or end is None or not text:
			continue
		segments.append(Segment(start, end, text))
	return segments


def _parse_timestamp(timestamp_str: str) -> Optional[float]:
	"""Parse an ``HH:MM:SS,mmm`` timestamp; None if malformed or negative."""
	if timestamp_str.startswith("-"):
		return None
	try:
		time_part, _, ms_part = timestamp_str.replace(".", ",").partition(",")
		hours, minutes, seconds = map(int, time_part.split(":"))
		return hours * 3600 + minutes * 60 + seconds + (int(ms_part) if ms_part else 0) / 1000.0
	except ValueError:
		return None


def parse_vtt_bytes(data: bytes) -> List[Segment]:
	"""Parse WebVTT bytes into segments."""
	vtt = webvtt.read_buffer(io.StringIO(decode_subtitle_bytes(data)))
	segments: List[Segment] = []
	for caption in vtt:
		text = (caption.text or "").replace("\n", " ").strip()
		if text:
			segments.append(Segment(_vtt_ts_to_seconds(caption.start), _vtt_ts_to_seconds(caption.end), text))
	return segments


def _vtt_ts_to_seconds(ts: str) -> float:
	# WebVTT uses HH:MM:SS.mmm (hours optional)
	parts = ts.split(":")
	if len(parts) == 2:
		parts = ["0"] + parts
	if len(parts) != 3:
		return 0.0
	return int(parts[0]) * 3600 + int(parts[1]) * 60 + float(parts[2])


def parse_ass_bytes(data: bytes) -> List[Segment]:
	"""Parse ASS/SSA bytes into segments (pysubs2 works in milliseconds)."""
	subs = pysubs2.SSAFile.from_string(decode_subtitle_bytes(data))
	segments: List[Segment] = []
	for line in subs:
		text = line.plaintext.replace("\n", " ").strip()
		if text:
			segments.append(Segment(line.start / 1000.0, line.end / 1000.0, text))
	return segments


def parse_subtitle_bytes(data: bytes, ext: str) -> List[Segment]:
	"""Dispatch on the file extension ('srt' | 'vtt' | 'ass' | 'ssa')."""
	ext = ext.lower().lstrip(".")
	if ext == "srt":
		return parse_srt_bytes(data)
	if ext == "vtt":
		return parse_vtt_bytes(data)
	if ext in ("ass", "ssa"):
		return parse_ass_bytes(data)
	raise ValueError(f"Unsupported subtitle extension: {ext}")
