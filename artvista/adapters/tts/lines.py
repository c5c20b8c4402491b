import re

# Neural voice used for online narration and for pre-rendered offline audio
DEFAULT_VOICE = "en-US-AriaNeural"

# Offline audio lives at <audio_dir>/<variant><ext>
AUDIO_EXTS = (".mp3", ".wav")


def audio_variants(label: str) -> list[str]:
    """'Mona Lisa' -> ['Mona Lisa', 'monalisa', 'mona_lisa'] (tried in this order)."""
    raw = label.strip()
    lower = raw.lower()
    variants = [raw, re.sub(r"\s+", "", lower), re.sub(r"\s+", "_", lower)]
    seen, out = set(), []
    for v in variants:
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out
