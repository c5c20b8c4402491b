from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from artvista.adapters.tts import player_local
from artvista.adapters.tts.lines import audio_variants
from artvista.adapters.tts.player_local import LocalNarrator


class FakeProc:
    def __init__(self, cmd, block=False, exit_code=0):
        self.cmd = cmd
        self.exit_code = exit_code
        self.returncode = None
        self.terminated = False
        self._exit = threading.Event()
        if not block:
            self._exit.set()

    def wait(self):
        self._exit.wait(5)
        if self.returncode is None:
            self.returncode = self.exit_code
        return self.returncode

    def poll(self):
        return self.returncode if self._exit.is_set() else None

    def terminate(self):
        self.terminated = True
        self.returncode = -15
        self._exit.set()


class Spawner:
    def __init__(self, block=False, exit_codes=()):
        self.block = block
        self.exit_codes = list(exit_codes)
        self.procs: list[FakeProc] = []

    def __call__(self, cmd, **kwargs):
        code = self.exit_codes.pop(0) if self.exit_codes else 0
        proc = FakeProc(cmd, block=self.block, exit_code=code)
        self.procs.append(proc)
        return proc


def wait_for(cond, timeout=2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if cond():
            return True
        time.sleep(0.01)
    return cond()


@pytest.fixture(autouse=True)
def fake_tools(monkeypatch):
    monkeypatch.setattr(player_local, "player_command", lambda path: ["player", str(path)])
    monkeypatch.setattr(player_local, "speech_command", lambda text: ["say", text])


@pytest.fixture
def audio_dir(tmp_path):
    d = tmp_path / "audios"
    d.mkdir()
    return d


def test_audio_variants() -> None:
    assert audio_variants("Mona Lisa") == ["Mona Lisa", "monalisa", "mona_lisa"]
    assert audio_variants("starry") == ["starry"]


def test_offline_plays_first_existing_variant(status, audio_dir) -> None:
    (audio_dir / "mona_lisa.mp3").write_bytes(b"ID3")
    (audio_dir / "monalisa.wav").write_bytes(b"RIFF")
    spawn = Spawner()
    ended = threading.Event()

    h = LocalNarrator(status, audio_dir, spawn=spawn).narrate("Mona Lisa", "ignored", False, on_end=ended.set)

    assert h.wait(2)
    assert ended.is_set()
    assert h.source == "monalisa.wav"
    assert spawn.procs[0].cmd == ["player", str(audio_dir / "monalisa.wav")]
    assert not h.playing


def test_offline_without_assets_logs_and_finishes(status, audio_dir) -> None:
    spawn = Spawner()
    h = LocalNarrator(status, audio_dir, spawn=spawn).narrate("The Scream", "x", False)
    assert h.wait(2)
    assert spawn.procs == []
    assert any("audio play failed for variants" in line for line in status.logs)


def test_online_synthesizes_then_plays(status, audio_dir) -> None:
    spawn = Spawner()
    written: list[Path] = []

    def synthesize(text, voice, out_path):
        Path(out_path).write_bytes(b"mp3")
        written.append(Path(out_path))

    n = LocalNarrator(status, audio_dir, voice="en-GB-SoniaNeural", spawn=spawn, synthesize=synthesize)
    h = n.narrate("Mona Lisa", "A portrait.", True)

    assert h.wait(2)
    assert h.source == "edge-tts"
    assert spawn.procs[0].cmd == ["player", str(written[0])]
    assert not written[0].exists()


def test_online_synthesis_failure_uses_local_speech(status, audio_dir) -> None:
    spawn = Spawner()

    def synthesize(text, voice, out_path):
        raise ConnectionError("no route")

    h = LocalNarrator(status, audio_dir, spawn=spawn, synthesize=synthesize).narrate("Mona Lisa", "A portrait.", True)

    assert h.wait(2)
    assert h.source == "say"
    assert spawn.procs[0].cmd == ["say", "A portrait."]


def test_new_narration_stops_previous(status, audio_dir) -> None:
    (audio_dir / "mona_lisa.mp3").write_bytes(b"ID3")
    spawn = Spawner(block=True)
    ended = []
    n = LocalNarrator(status, audio_dir, spawn=spawn)

    first = n.narrate("Mona Lisa", "x", False, on_end=lambda: ended.append("first"))
    assert wait_for(lambda: len(spawn.procs) == 1)
    second = n.narrate("Mona Lisa", "x", False)

    assert first.wait(2)
    assert first.stopped
    assert spawn.procs[0].terminated
    assert n.current is second
    assert ended == []

    assert wait_for(lambda: len(spawn.procs) == 2)
    assert second.playing
    n.stop()
    assert second.wait(2)
    assert spawn.procs[1].terminated


def test_spawn_failure_is_logged(status, audio_dir) -> None:
    (audio_dir / "mona_lisa.mp3").write_bytes(b"ID3")

    def spawn(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    h = LocalNarrator(status, audio_dir, spawn=spawn).narrate("Mona Lisa", "x", False)
    assert h.wait(2)
    assert any("could not start player" in line for line in status.logs)


def test_player_failure_moves_to_next_variant(status, audio_dir) -> None:
    (audio_dir / "monalisa.mp3").write_bytes(b"corrupt")
    (audio_dir / "mona_lisa.mp3").write_bytes(b"ID3")
    spawn = Spawner(exit_codes=[1, 0])
    ended = threading.Event()

    h = LocalNarrator(status, audio_dir, spawn=spawn).narrate("Mona Lisa", "x", False, on_end=ended.set)

    assert h.wait(2)
    assert [p.cmd[1] for p in spawn.procs] == [str(audio_dir / "monalisa.mp3"), str(audio_dir / "mona_lisa.mp3")]
    assert h.source == "mona_lisa.mp3"
    assert ended.is_set()
    assert any("trying next variant" in line for line in status.logs)


def test_every_variant_failing_ends_quietly(status, audio_dir) -> None:
    (audio_dir / "mona_lisa.mp3").write_bytes(b"corrupt")
    spawn = Spawner(exit_codes=[2])
    ended = threading.Event()

    h = LocalNarrator(status, audio_dir, spawn=spawn).narrate("Mona Lisa", "x", False, on_end=ended.set)

    assert h.wait(2)
    assert h.source is None
    assert not ended.is_set()
    assert any("audio play failed for variants" in line for line in status.logs)
