from finerp.core.i18n import (
    SUPPORTED_LANGUAGES, load_catalog, normalize_language, parse_accept_language, resolve_language, translate,
)

def test_catalogs_have_the_same_keys():
    english = set(load_catalog("en"))
    for lang in SUPPORTED_LANGUAGES:
        assert set(load_catalog(lang)) == english

def test_translate():
    assert translate("accounting.debit", "en") == "Debit"
    assert translate("accounting.debit", "ne") == "डेबिट"
    assert translate("accounting.debit", "fr") == "Debit"
    assert translate("accounting.doesNotExist", "ne") == "accounting.doesNotExist"

def test_normalize_language():
    assert normalize_language("ne-NP") == "ne"
    assert normalize_language("EN_us") == "en"
    assert normalize_language("de") is None
    assert normalize_language("") is None

def test_parse_accept_language():
    assert parse_accept_language("ne-NP,ne;q=0.9,en;q=0.8") == "ne"
    assert parse_accept_language("fr;q=1.0,en;q=0.5,ne;q=0.7") == "ne"
    assert parse_accept_language("fr,de") is None
    assert parse_accept_language(None) is None

def test_resolve_language_precedence():
    assert resolve_language("ne", "en", "en", "en") == "ne"
    assert resolve_language(None, "ne", "en", "en") == "ne"
    assert resolve_language(None, None, "ne", "en") == "ne"
    assert resolve_language(None, None, None, "ne-NP") == "ne"
    assert resolve_language("xx", None, None, None) == "en"
