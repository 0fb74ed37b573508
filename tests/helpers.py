from typing import Sequence, Tuple

from srtalign.parsers.sentences import sentences_from_segments
from srtalign.parsers.subtitles import Segment
from srtalign.util.types import Sentence, SentenceStream


def timed_sentences(spans: Sequence[Tuple[float, float]], prefix: str = "s"):
    """Sentences with already derived times, ids s1, s2, ..."""
    return [
        Sentence(id=f"{prefix}{i + 1}", index=i, start=start, end=end)
        for i, (start, end) in enumerate(spans)
    ]


def cue_stream(cues: Sequence[Tuple[float, float, str]], source_file: str = "cues.srt") -> SentenceStream:
    """Stream with one sentence per (start, end, text) cue."""
    segments = [Segment(start, end, text) for start, end, text in cues]
    return sentences_from_segments(segments, source_file=source_file)


# Same four lines in two languages; the source runs 10 seconds late
SOURCE_CUES = [
    (10.0, 12.0, "Hello Annika"),
    (13.0, 15.0, "How are you"),
    (16.0, 18.0, "Fine thanks"),
    (19.0, 21.0, "Goodbye Robert"),
]
TARGET_CUES = [
    (0.0, 2.0, "Hej Annika"),
    (3.0, 5.0, "Hur mår du"),
    (6.0, 8.0, "Bra tack"),
    (9.0, 11.0, "Hej då Robert"),
]

SAMPLE_XML = """<?xml version="1.0" encoding="utf-8"?>
<document id="1">
  <s id="1">
    <time id="T1S" value="00:00:01,000" />
    <w id="1.1">Hello</w>
    <w id="1.2">Anna</w>
    <time id="T1E" value="00:00:02,500" />
  </s>
  <s id="2">
    <time id="T2S" value="00:00:03,000" />
    <w id="2.1">Goodbye</w>
    <w id="2.2">.</w>
  </s>
  <s id="3">
    <w id="3.1">See</w>
    <time id="T2E" value="00:00:05,000" />
    <w id="3.2">you</w>
  </s>
</document>
"""

SAMPLE_SRT = """1
00:00:01,000 --> 00:00:02,500
- JOHN: Hello there!

2
00:00:03,000 --> 00:00:04,000
[music]

3
00:00:05,000 --> 00:00:06,000
<i>Good night</i>
"""


def write_srt(path, cues: Sequence[Tuple[float, float, str]]) -> None:
    def fmt(ts: float) -> str:
        ms = int(round((ts - int(ts)) * 1000))
        return f"{int(ts) // 3600:02d}:{(int(ts) // 60) % 60:02d}:{int(ts) % 60:02d},{ms:03d}"

    blocks = [f"{i}\n{fmt(start)} --> {fmt(end)}\n{text}\n" for i, (start, end, text) in enumerate(cues, 1)]
    path.write_text("\n".join(blocks), encoding="utf-8")
