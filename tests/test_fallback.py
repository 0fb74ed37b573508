import subprocess

import pytest

from srtalign.analysis.fallback import UplugFallback


def test_command_line():
    fallback = UplugFallback(executable="uplug", aligner="align/hun")

    assert fallback.command("en.xml", "sv.xml") == ["uplug", "align/hun", "-src", "en.xml", "-trg", "sv.xml"]


def test_missing_executable_is_unavailable(tmp_path):
    assert not UplugFallback(executable=str(tmp_path / "no-such-aligner")).is_available()


def test_returns_stdout():
    fallback = UplugFallback(executable="echo", aligner="align/hun")

    assert fallback.is_available()
    assert fallback("en.xml", "sv.xml") == "align/hun -src en.xml -trg sv.xml\n"


def test_failing_process_raises():
    with pytest.raises(subprocess.CalledProcessError):
        UplugFallback(executable="false")("en.xml", "sv.xml")
