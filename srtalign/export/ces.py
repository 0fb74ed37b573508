"""Render sentence alignments as XCES documents or plain link lists."""

from typing import List
from xml.sax.saxutils import quoteattr

from srtalign.util.types import SentenceAlignment


CES_HEADER = (
    '<?xml version="1.0" encoding="utf-8"?>',
    '<!DOCTYPE cesAlign PUBLIC "-//CES//DTD XML cesAlign//EN" "">',
    '<cesAlign version="1.0">',
)


def render_ces(source_file: str, target_file: str, alignment: SentenceAlignment) -> str:
    """Render an alignment as a ``cesAlign`` document.

    Links are numbered from ``SL0``; each ``xtargets`` lists the source ids,
    a semicolon, then the target ids.

    Example:
        <link id="SL0" xtargets="1 2;1" />
    """
    lines: List[str] = list(CES_HEADER)
    lines.append(f'<linkGrp targType="s" fromDoc={quoteattr(source_file)} toDoc={quoteattr(target_file)}>')
    for i, link in enumerate(alignment.links):
        xtargets = " ".join(link.source_ids) + ";" + " ".join(link.target_ids)
        lines.append(f'<link id="SL{i}" xtargets={quoteattr(xtargets)} />')
    lines.append("</linkGrp>")
    lines.append("</cesAlign>")
    lines.append("")
    return "\n".join(lines)


def render_links(alignment: SentenceAlignment) -> str:
    """One ``source-ids ; target-ids`` line per link."""
    lines = [f"{' '.join(link.source_ids)} ; {' '.join(link.target_ids)}" for link in alignment.links]
    lines.append("")
    return "\n".join(lines)
