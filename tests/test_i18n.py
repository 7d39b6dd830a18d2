"""Tests for ceno.i18n."""

from pathlib import Path

import pytest

from ceno.config import CenoConfig
from ceno.errors import TranslationError
from ceno.i18n import (
    Translator,
    available_locales,
    load_catalog,
    normalize_tag,
    resolve_locale,
    tfunc,
)


@pytest.fixture
def translations_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "translations"
    directory.mkdir()
    (directory / "en-us.yaml").write_text(
        'greeting: "Hello"\n'
        'unrecognized_error_code: "Unknown code {ErrCode}"\n'
        'only_english: "English only"\n',
        encoding="utf-8",
    )
    (directory / "fr-fr.yaml").write_text(
        'greeting: "Bonjour"\n'
        'unrecognized_error_code: "Code inconnu {ErrCode}"\n',
        encoding="utf-8",
    )
    return directory


def _config(translations_dir: Path) -> CenoConfig:
    return CenoConfig.from_dict({"locale": {"translations_dir": str(translations_dir)}})


class TestResolveLocale:
    AVAILABLE = ("en-us", "fr-fr")

    def test_exact(self):
        assert resolve_locale("fr-fr", "en-us", self.AVAILABLE) == "fr-fr"

    def test_unset(self):
        assert resolve_locale(None, "en-us", self.AVAILABLE) == "en-us"
        assert resolve_locale("", "en-us", self.AVAILABLE) == "en-us"

    def test_unsupported(self):
        assert resolve_locale("de-de", "en-us", self.AVAILABLE) == "en-us"

    def test_primary_language(self):
        assert resolve_locale("fr", "en-us", self.AVAILABLE) == "fr-fr"
        assert resolve_locale("fr-ca", "en-us", self.AVAILABLE) == "fr-fr"

    def test_posix_style_tag(self):
        assert resolve_locale("fr_FR.UTF-8", "en-us", self.AVAILABLE) == "fr-fr"

    def test_normalize_tag(self):
        assert normalize_tag("EN_us") == "en-us"
        assert normalize_tag("fr_FR.UTF-8") == "fr-fr"


class TestCatalog:
    def test_available_locales(self, translations_dir: Path):
        assert available_locales(translations_dir) == ("en-us", "fr-fr")

    def test_missing_directory(self, tmp_path: Path):
        assert available_locales(tmp_path / "nowhere") == ()

    def test_malformed_catalog(self, tmp_path: Path):
        path = tmp_path / "xx-xx.yaml"
        path.write_text("key: [unclosed\n", encoding="utf-8")

        with pytest.raises(TranslationError):
            load_catalog(str(path))

    def test_catalog_must_be_mapping(self, tmp_path: Path):
        path = tmp_path / "yy-yy.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(TranslationError):
            load_catalog(str(path))

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(TranslationError):
            load_catalog(str(tmp_path / "zz-zz.yaml"))


class TestTranslator:
    def test_params(self):
        T = Translator("en-us", {"unrecognized_error_code": "Unknown code {ErrCode}"})
        assert T("unrecognized_error_code", {"ErrCode": 9999}) == "Unknown code 9999"

    def test_missing_param_kept(self):
        T = Translator("en-us", {"missing_view": "Missing {View}"})
        assert T("missing_view", {"Other": 1}) == "Missing {View}"

    def test_missing_key_returns_key(self):
        T = Translator("en-us", {})
        assert T("no_such_key") == "no_such_key"

    def test_fallback_catalog(self):
        T = Translator("fr-fr", {"greeting": "Bonjour"}, {"greeting": "Hello", "bye": "Bye"})
        assert T("greeting") == "Bonjour"
        assert T("bye") == "Bye"
        assert T.has("bye")
        assert not T.has("nothing")

    def test_stray_brace_left_unformatted(self):
        T = Translator("en-us", {"advice": "Use {curly braces for {Url}"})
        assert T("advice", {"Url": "http://x"}) == "Use {curly braces for {Url}"

    def test_positional_field_left_unformatted(self):
        T = Translator("en-us", {"advice": "Step {0}: reload {Url}"})
        assert T("advice", {"Url": "http://x"}) == "Step {0}: reload {Url}"

    def test_attribute_field_left_unformatted(self):
        T = Translator("en-us", {"advice": "Code {ErrCode.real.x}"})
        assert T("advice", {"ErrCode": 5}) == "Code {ErrCode.real.x}"


class TestTfunc:
    def test_default_locale(self, translations_dir: Path):
        T = tfunc(_config(translations_dir), environ={})
        assert T.locale == "en-us"
        assert T("greeting") == "Hello"

    def test_environment_locale(self, translations_dir: Path):
        T = tfunc(_config(translations_dir), environ={"CENOLANG": "fr-fr"})
        assert T.locale == "fr-fr"
        assert T("greeting") == "Bonjour"
        assert T("unrecognized_error_code", {"ErrCode": 42}) == "Code inconnu 42"

    def test_falls_back_to_default_catalog(self, translations_dir: Path):
        T = tfunc(_config(translations_dir), environ={"CENOLANG": "fr-fr"})
        assert T("only_english") == "English only"

    def test_unsupported_locale(self, translations_dir: Path):
        T = tfunc(_config(translations_dir), environ={"CENOLANG": "de-de"})
        assert T.locale == "en-us"

    def test_missing_translations_dir(self, tmp_path: Path):
        T = tfunc(_config(tmp_path / "nowhere"), environ={"CENOLANG": "fr-fr"})
        assert T.locale == "en-us"
        assert T("greeting") == "greeting"


class TestBundledCatalogs:
    def test_bundled_locales(self):
        T = tfunc(CenoConfig(), environ={})
        assert T.locale == "en-us"
        assert "9999" in T("unrecognized_error_code", {"ErrCode": 9999})
        assert "error.html" in T("missing_view", {"View": "error.html"})

    def test_bundled_french(self):
        T = tfunc(CenoConfig(), environ={"CENOLANG": "fr-fr"})
        assert T("retry_html") == "Réessayer"
