import re
from pathlib import Path
from artvista.orchestrator.errors import DescriptionUnavailableError

DEFAULT_DESCRIPTION = "No description available."
STORY_NOT_FOUND = "Story not found for this artwork."


def story_filename(title: str) -> str:
    """'Mona Lisa' -> 'mona_lisa.txt'"""
    return re.sub(r"\s+", "_", title.strip().lower()) + ".txt"


def read_story(stories_dir: Path, title: str) -> str | None:
    """Story text for title, or None. Titles that would leave stories_dir find nothing."""
    if "/" in title or "\\" in title or ".." in title or "\x00" in title:
        return None
    root = Path(stories_dir).resolve()
    path = (root / story_filename(title)).resolve()
    if path.parent != root or not path.is_file():
        return None
    return path.read_text(encoding="utf-8").strip()


class DescriptionResolver:
    """
    label -> narrative text. Never raises.

    Order: Gemini (online + key set) -> local story file -> DEFAULT_DESCRIPTION.
    """

    def __init__(self, status_store, stories_dir: Path, text_service=None):
        self.status = status_store
        self.stories_dir = Path(stories_dir)
        self.text_service = text_service

    def describe(self, label: str, is_online: bool) -> str:
        if is_online and self.text_service is not None and self.text_service.configured:
            try:
                return self.text_service.generate(label)
            except DescriptionUnavailableError as e:
                self.status.log(f"description: generative text failed, using local story: {e}")
            except Exception as e:
                self.status.log(f"description: generative text error {type(e).__name__}: {e}")

        try:
            text = read_story(self.stories_dir, label)
        except (OSError, UnicodeDecodeError) as e:
            self.status.log(f"description: story read failed for '{label}': {e}")
            text = None
        if text:
            self.status.log(f"description: local story {story_filename(label)}")
            return text

        self.status.log(f"description: nothing for '{label}', using default")
        return DEFAULT_DESCRIPTION
