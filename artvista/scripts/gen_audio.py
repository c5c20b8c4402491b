"""
Pre-render offline narration audio for every story using edge-tts.

Usage:
    pip install -e .
    python -m artvista.scripts.gen_audio

Output:
    <ARTVISTA_AUDIO_DIR>/<story name>.mp3   e.g. mona_lisa.mp3

The file stem matches the underscored label variant the offline narrator
tries, so "Mona Lisa" plays mona_lisa.mp3.
"""

import asyncio
import edge_tts
from dotenv import load_dotenv
from artvista.config import settings_from_env


async def generate_story(text: str, voice: str, out_path):
    communicate = edge_tts.Communicate(text, voice)
    await communicate.save(str(out_path))
    print(f"  {out_path.name}")


async def main():
    load_dotenv(override=False)
    settings = settings_from_env()
    settings.audio_dir.mkdir(parents=True, exist_ok=True)

    stories = sorted(settings.stories_dir.glob("*.txt"))
    if not stories:
        print(f"No stories found in {settings.stories_dir}")
        return

    print(f"Generating narration audio ({settings.tts_voice})...")
    tasks = []
    for story in stories:
        text = story.read_text(encoding="utf-8").strip()
        if not text:
            continue
        out_path = settings.audio_dir / f"{story.stem}.mp3"
        tasks.append(generate_story(text, settings.tts_voice, out_path))
    await asyncio.gather(*tasks)
    print(f"Done. Files saved to {settings.audio_dir}")


if __name__ == "__main__":
    asyncio.run(main())
