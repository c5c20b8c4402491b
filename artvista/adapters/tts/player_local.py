"""
Narration player — cross-platform.

Online:
  1. Synthesize the description with edge-tts (neural voice) and play it
  2. Fallback: speak it with macOS `say` / espeak
Offline:
  Play a pre-recorded asset: <audio_dir>/<variant>.mp3|.wav for each label variant

Only one narration plays at a time; a new one stops the previous. Failures are
logged, never raised.
"""

import asyncio
import os
import shutil
import subprocess
import sys
import tempfile
import threading
from pathlib import Path
from typing import Callable, Optional

import edge_tts

from artvista.adapters.tts import lines as L


def player_command(path: Path) -> list[str] | None:
    p = str(path)
    if sys.platform == "darwin":
        return ["afplay", p]
    if shutil.which("ffplay"):
        return ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", p]
    if shutil.which("mpv"):
        return ["mpv", "--no-video", "--really-quiet", p]
    if p.endswith(".wav") and shutil.which("aplay"):
        return ["aplay", "-q", p]
    if shutil.which("paplay"):
        return ["paplay", p]
    return None


def speech_command(text: str) -> list[str] | None:
    if sys.platform == "darwin":
        return ["say", text]
    if shutil.which("espeak"):
        return ["espeak", text]
    if shutil.which("espeak-ng"):
        return ["espeak-ng", text]
    return None


def edge_tts_synthesize(text: str, voice: str, out_path: Path):
    asyncio.run(edge_tts.Communicate(text, voice).save(str(out_path)))


class NarrationHandle:
    def __init__(self, label: str, mode: str):
        self.label = label
        self.mode = mode  # "speech" | "audio"
        self.source: Optional[str] = None
        self._proc = None
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._done = threading.Event()

    @property
    def playing(self) -> bool:
        return not self._done.is_set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def _attach(self, proc) -> bool:
        with self._lock:
            if self._stopped.is_set():
                proc.terminate()
                return False
            self._proc = proc
            return True

    def stop(self):
        with self._lock:
            self._stopped.set()
            if self._proc is not None and self._proc.poll() is None:
                self._proc.terminate()

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)


class LocalNarrator:
    def __init__(self, status_store, audio_dir: Path, voice: str = L.DEFAULT_VOICE,
                 spawn=subprocess.Popen, synthesize: Callable[[str, str, Path], None] = edge_tts_synthesize):
        self.status = status_store
        self.audio_dir = Path(audio_dir)
        self.voice = voice
        self._spawn = spawn
        self._synthesize = synthesize
        self._current: Optional[NarrationHandle] = None
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[NarrationHandle]:
        return self._current

    def narrate(self, label: str, text: str, is_online: bool,
                on_end: Callable[[], None] | None = None) -> NarrationHandle:
        handle = NarrationHandle(label, "speech" if is_online else "audio")
        with self._lock:
            if self._current is not None:
                self._current.stop()
            self._current = handle
        t = threading.Thread(target=self._run, args=(handle, text, on_end), daemon=True)
        t.start()
        return handle

    def stop(self):
        with self._lock:
            if self._current is not None:
                self._current.stop()

    # ── worker ─────────────────────────────────────────────────────────────

    def _run(self, handle: NarrationHandle, text: str, on_end):
        tmp: Optional[Path] = None
        try:
            if handle.mode == "speech":
                proc, tmp = self._start_speech(handle, text)
            else:
                proc = self._start_audio(handle)
            if proc is None:
                return
            proc.wait()
            if not handle.stopped and on_end is not None:
                on_end()
        except Exception as e:
            self.status.log(f"narration: error {type(e).__name__}: {e}")
        finally:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            handle._done.set()

    def _launch(self, handle: NarrationHandle, cmd: list[str]):
        try:
            proc = self._spawn(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            self.status.log(f"narration: could not start {cmd[0]}: {e}")
            return None
        if not handle._attach(proc):
            return None
        return proc

    def _start_speech(self, handle: NarrationHandle, text: str):
        if handle.stopped:
            return None, None
        fd, name = tempfile.mkstemp(prefix="artvista-tts-", suffix=".mp3")
        os.close(fd)
        tmp = Path(name)
        try:
            self._synthesize(text, self.voice, tmp)
            cmd = player_command(tmp)
            if cmd is not None:
                handle.source = "edge-tts"
                self.status.log(f"narration: speaking '{handle.label}' ({self.voice})")
                return self._launch(handle, cmd), tmp
            self.status.log("narration: no audio player found for synthesized speech")
        except Exception as e:
            self.status.log(f"narration: synthesis failed ({type(e).__name__}: {e}), trying local speech")

        cmd = speech_command(text)
        if cmd is None:
            self.status.log("narration: no speech tool available")
            return None, tmp
        handle.source = cmd[0]
        self.status.log(f"narration: {cmd[0]} '{handle.label}'")
        return self._launch(handle, cmd), tmp

    def _start_audio(self, handle: NarrationHandle):
        variants = L.audio_variants(handle.label)
        for v in variants:
            for ext in L.AUDIO_EXTS:
                if handle.stopped:
                    return None
                path = self.audio_dir / f"{v}{ext}"
                if not path.is_file():
                    continue
                cmd = player_command(path)
                if cmd is None:
                    self.status.log("narration: no audio player found, skipping playback")
                    return None
                proc = self._launch(handle, cmd)
                if proc is None:
                    continue
                handle.source = path.name
                self.status.log(f"narration: playing {path.name}")
                rc = proc.wait()
                if rc == 0 or handle.stopped:
                    return proc
                self.status.log(f"narration: player exited {rc} on {path.name}, trying next variant")
                handle.source = None
        self.status.log(f"narration: audio play failed for variants {variants}")
        return None
