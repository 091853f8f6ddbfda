from __future__ import annotations

from .vocabulary import Vocabulary, default_vocabulary


def normalize(raw: str | None, vocabulary: Vocabulary | None = None) -> str:
    """Return the lookup key for a spoken item name.

    Lowercases and trims, maps known spellings to their canonical form and
    strips a single leading possessive ("मेरी चाबी" -> "चाबी").
    """

    if not raw:
        return ""
    vocab = vocabulary or default_vocabulary()

    normalized = raw.lower().strip()
    canonical = vocab.canonical_by_variant.get(normalized)
    if canonical is not None:
        return canonical

    if vocab.possessive_re is not None:
        normalized = vocab.possessive_re.sub("", normalized, count=1)
    return normalized
