import io
import sys

import pytest
from PIL import Image

from chip8 import cli
from chip8.decoder import encode_words
from chip8.tracing import perfetto_tracing


class FakeStdin:
    def __init__(self, data: bytes = b"", tty: bool = False) -> None:
        self.buffer = io.BytesIO(data)
        self._tty = tty

    def isatty(self) -> bool:
        return self._tty


@pytest.fixture
def stdin(monkeypatch):
    def _feed(data: bytes = b"", tty: bool = False) -> FakeStdin:
        fake = FakeStdin(data, tty)
        monkeypatch.setattr(sys, "stdin", fake)
        return fake

    return _feed


HEADLESS = ["--display", "none", "--no-throttle"]
LOOP = encode_words([0x00E0, 0x1202])


def test_interactive_terminal_prints_usage(stdin, capsys) -> None:
    stdin(tty=True)
    assert cli.main(HEADLESS) == cli.EXIT_USAGE
    assert "accepts programs through stdin" in capsys.readouterr().err


def test_empty_input_is_a_usage_error(stdin, capsys) -> None:
    stdin(b"")
    assert cli.main(HEADLESS) == cli.EXIT_USAGE


def test_oversize_program(stdin, capsys) -> None:
    stdin(b"\x12\x00" * 1793)
    assert cli.main(HEADLESS) == cli.EXIT_USAGE
    err = capsys.readouterr().err
    assert "too large" in err
    assert "3584" in err


def test_bounded_run_exits_cleanly(stdin) -> None:
    stdin(LOOP)
    assert cli.main(HEADLESS + ["--ticks", "5"]) == cli.EXIT_OK


def test_unknown_opcode_is_a_runtime_error(stdin, capsys) -> None:
    stdin(encode_words([0x6001, 0x0123]))
    assert cli.main(HEADLESS) == cli.EXIT_RUNTIME_ERROR
    assert "error: Unknown opcode 0x0123 at 0x202" in capsys.readouterr().err


def test_disassemble(stdin, capsys) -> None:
    stdin(LOOP)
    assert cli.main(["--disassemble"]) == cli.EXIT_OK
    out = capsys.readouterr().out.splitlines()
    assert out == ["200  00E0  CLS", "202  1202  JP 0x202"]


def test_bad_hold_spec(stdin, capsys) -> None:
    stdin(LOOP)
    assert cli.main(HEADLESS + ["--hold", "P:1"]) == cli.EXIT_USAGE
    assert "error:" in capsys.readouterr().err


def test_bad_config_file(stdin, tmp_path) -> None:
    stdin(LOOP)
    path = tmp_path / "bad.json"
    path.write_text('{"display_zoom": 0}')
    assert cli.main(HEADLESS + ["--config", str(path)]) == cli.EXIT_USAGE


def test_malformed_config_value_is_a_usage_error(stdin, tmp_path, capsys) -> None:
    stdin(LOOP)
    path = tmp_path / "layout.json"
    path.write_text('{"keypad_layout": []}')
    assert cli.main(HEADLESS + ["--ticks", "1", "--config", str(path)]) == cli.EXIT_USAGE
    assert "keypad_layout must be a string" in capsys.readouterr().err


def test_save_png_of_final_frame(stdin, tmp_path) -> None:
    # V0 = 0, I = glyph 0, draw it, loop.
    stdin(encode_words([0xF029, 0xD005, 0x1204]))
    target = tmp_path / "final.png"
    assert cli.main(HEADLESS + ["--ticks", "3", "--save-png", str(target)]) == cli.EXIT_OK

    with Image.open(target) as image:
        assert image.size == (64 * 16, 32 * 16)
        assert image.getpixel((0, 0)) == (255, 255, 255)


def test_frames_dir_with_image_display(stdin, tmp_path) -> None:
    stdin(LOOP)
    frames = tmp_path / "frames"
    argv = [
        "--display", "image", "--no-throttle", "--ticks", "4",
        "--frames-dir", str(frames), "--frame-interval", "2",
    ]
    assert cli.main(argv) == cli.EXIT_OK
    assert sorted(p.name for p in frames.iterdir()) == ["frame_00000.png", "frame_00002.png"]


def test_frames_dir_selects_image_display(stdin, tmp_path, capsys) -> None:
    stdin(LOOP)
    frames = tmp_path / "frames"
    argv = ["--no-throttle", "--ticks", "2", "--frames-dir", str(frames), "--frame-interval", "1"]
    assert cli.main(argv) == cli.EXIT_OK
    assert sorted(p.name for p in frames.iterdir()) == ["frame_00000.png", "frame_00001.png"]
    assert "\x1b[H" not in capsys.readouterr().out


def test_zero_frame_interval_is_a_usage_error(stdin, tmp_path) -> None:
    stdin(LOOP)
    argv = HEADLESS + ["--frames-dir", str(tmp_path), "--frame-interval", "0"]
    assert cli.main(argv) == cli.EXIT_USAGE


def test_terminal_display_writes_frames(stdin, capsys) -> None:
    stdin(LOOP)
    assert cli.main(["--no-throttle", "--ticks", "2"]) == cli.EXIT_OK
    out = capsys.readouterr().out
    assert out.startswith("\x1b[H")


def test_perfetto_trace_is_written(stdin, monkeypatch, tmp_path) -> None:
    saved = []

    class Builder:
        def __init__(self, name):
            pass

        def add_thread(self, name):
            return 1

        def add_counter_track(self, name, unit):
            return 2

        def add_instant_event(self, track, name, ts):
            return self

        def add_annotations(self, args):
            pass

        def update_counter(self, track, value, ts):
            pass

        def begin_slice(self, track, name, ts):
            return self

        def end_slice(self, track, ts):
            pass

        def save(self, path):
            saved.append(path)

    monkeypatch.setattr(perfetto_tracing, "PerfettoTraceBuilder", Builder)
    stdin(LOOP)
    target = str(tmp_path / "cli.perfetto-trace")
    argv = HEADLESS + ["--ticks", "3", "--perfetto", "--trace-file", target]
    assert cli.main(argv) == cli.EXIT_OK
    assert saved == [target]
