from fractions import Fraction
from pathlib import Path

import ffmpeg
import pytest

from gifconverter.domain.exceptions import ProbeError
from gifconverter.domain.media import (
    EncodeTarget,
    MediaProfile,
    parse_frame_rate,
    probe_media,
    profile_from_probe,
)


@pytest.mark.parametrize("raw, expected", [
    ("30000/1001", Fraction(30000, 1001)),
    ("25/1", Fraction(25)),
    ("24.7", Fraction("24.7")),
])
def test_parse_frame_rate(raw, expected):
    assert parse_frame_rate(raw) == expected


@pytest.mark.parametrize("raw", ["0/0", "0/1", "", "abc", None])
def test_parse_frame_rate_rejects_unknown_rates(raw):
    with pytest.raises(ValueError):
        parse_frame_rate(raw)


def test_rounded_fps_rounds_up():
    assert MediaProfile(fps=Fraction(30000, 1001), height=720).rounded_fps == 30
    assert MediaProfile(fps=Fraction(25), height=720).rounded_fps == 25


def test_encode_target_caps_fps_and_height():
    profile = MediaProfile(fps=Fraction("24.7"), height=720)
    assert EncodeTarget.from_profile(profile, max_fps=20, max_height=480) == EncodeTarget(fps=20, height=480)


def test_encode_target_keeps_values_under_the_caps():
    profile = MediaProfile(fps=Fraction("14.2"), height=360)
    assert EncodeTarget.from_profile(profile, max_fps=20, max_height=480) == EncodeTarget(fps=15, height=360)


def test_profile_from_probe_uses_first_video_stream():
    probe = {"streams": [
        {"codec_type": "audio"},
        {"codec_type": "video", "avg_frame_rate": "24/1", "height": 1080},
        {"codec_type": "video", "avg_frame_rate": "60/1", "height": 240},
    ]}
    assert profile_from_probe(probe, Path("a.mp4")) == MediaProfile(fps=Fraction(24), height=1080)


@pytest.mark.parametrize("streams", [
    [{"codec_type": "audio"}],
    [{"codec_type": "video", "avg_frame_rate": "0/0", "height": 720}],
    [{"codec_type": "video", "avg_frame_rate": "25/1"}],
])
def test_profile_from_probe_rejects_unusable_streams(streams):
    with pytest.raises(ProbeError):
        profile_from_probe({"streams": streams}, Path("a.mp4"))


def test_probe_media_wraps_ffprobe_errors(monkeypatch):
    def fake_probe(filename, cmd="ffprobe", **kwargs):
        raise ffmpeg.Error(cmd, b"", b"notes.txt: Invalid data found when processing input")

    monkeypatch.setattr(ffmpeg, "probe", fake_probe)

    with pytest.raises(ProbeError, match="Invalid data found"):
        probe_media(Path("notes.txt"))


def test_probe_media_passes_configured_command(monkeypatch):
    captured = {}

    def fake_probe(filename, cmd="ffprobe", **kwargs):
        captured["cmd"] = cmd
        return {"streams": [{"codec_type": "video", "avg_frame_rate": "30/1", "height": 720}]}

    monkeypatch.setattr(ffmpeg, "probe", fake_probe)

    profile = probe_media(Path("a.mp4"), ffprobe_cmd="/opt/ffmpeg/ffprobe")
    assert captured["cmd"] == "/opt/ffmpeg/ffprobe"
    assert profile.height == 720
