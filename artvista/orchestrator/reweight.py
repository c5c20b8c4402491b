from artvista.orchestrator.contracts import RankedLabel

# Substrings (lowercase) that mark a detector label as artwork-related
ARTWORK_KEYWORDS = (
    "mona lisa",
    "starry night",
    "the scream",
    "van gogh",
    "painting",
    "artwork",
    "masterpiece",
    "portrait",
    "canvas",
    "museum",
    "art",
)

ARTWORK_BOOST = 1.2


def is_artwork_label(description: str) -> bool:
    desc = description.lower()
    return any(k in desc for k in ARTWORK_KEYWORDS)


def boosted_score(label: RankedLabel) -> float:
    if is_artwork_label(label.description):
        return min(1.0, label.score * ARTWORK_BOOST)
    return label.score


def reweight(labels: list[RankedLabel]) -> list[RankedLabel]:
    """Boost artwork-related labels and re-rank.

    sorted() is stable, so labels that end up with equal scores keep the
    order the detector returned them in.
    """
    boosted = [RankedLabel(description=l.description, score=boosted_score(l), kind=l.kind) for l in labels]
    return sorted(boosted, key=lambda l: l.score, reverse=True)
