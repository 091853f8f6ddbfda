import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from yaad_rakhna.normalizer import normalize
from yaad_rakhna.vocabulary import default_vocabulary, load_vocabulary


def test_empty_and_missing_names_normalize_to_empty_string():
    assert normalize("") == ""
    assert normalize(None) == ""


def test_lowercases_and_trims():
    assert normalize("  Keys  ") == "keys"


def test_spelling_variants_share_one_canonical_form():
    variants = ["khari", "Khadi", " KHAARI ", "khaadi", "खारी", "खड़ी", "खरी", "खडी"]
    assert {normalize(v) for v in variants} == {"खारी"}


def test_possessive_prefix_is_stripped():
    assert normalize("मेरी चाबी") == normalize("चाबी") == "चाबी"
    assert normalize("अपना चश्मा") == "चश्मा"
    assert normalize("Meri chabi") == "chabi"


def test_possessive_is_stripped_once_and_only_at_the_front():
    assert normalize("मेरी मेरी चाबी") == "मेरी चाबी"
    assert normalize("चाबी मेरी") == "चाबी मेरी"
    assert normalize("मेरीचाबी") == "मेरीचाबी"


def test_bundled_vocabulary_is_loaded_from_package_data():
    vocab = default_vocabulary()
    assert "खारी" in vocab.variants
    assert "मेरी" in vocab.possessives
    assert "चाबी" in vocab.feminine_nouns


def test_custom_vocabulary_file(tmp_path):
    path = tmp_path / "vocab.json"
    path.write_text(
        json.dumps(
            {
                "variants": {"चश्मा": ["chashma", "chasma"]},
                "possessives": ["hamara"],
                "feminine_nouns": [],
            }
        ),
        encoding="utf-8",
    )
    vocab = load_vocabulary(path)
    assert normalize("Chasma", vocab) == "चश्मा"
    assert normalize("hamara chasma", vocab) == "chasma"
    assert normalize("khari", vocab) == "khari"
