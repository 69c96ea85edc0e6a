# tests/unit/domain/test_i18n.py
from __future__ import annotations

from dataclasses import dataclass

import pytest

from mill_atlas.domain.i18n import all_labels, ensure_locale, label_for, resolve_translation
from mill_atlas.domain.taxonomy import PropertyStatus, Typology, UserRole
from mill_atlas.exceptions import InvalidLocaleError


@dataclass
class _T:
    lang_code: str
    title: str


class TestEnsureLocale:
    def test_supported(self):
        assert ensure_locale("en", ("pt", "en")) == "en"

    @pytest.mark.parametrize("locale", [None, "", "fr", "PT"])
    def test_unsupported(self, locale):
        with pytest.raises(InvalidLocaleError) as exc_info:
            ensure_locale(locale, ("pt", "en"))
        assert str(exc_info.value) == 'Invalid locale. Must be "pt" or "en"'

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            ensure_locale("xx", ("pt",))


class TestLabels:
    def test_label_for_locale(self):
        assert label_for(Typology, "rodizio", "pt") == "Rodízio"
        assert label_for("typology", "rodizio", "en").startswith("Rodízio")

    def test_shared_raw_values_are_per_vocabulary(self):
        # 'public' exists in both property_status and user_role
        assert label_for(PropertyStatus, "public", "pt") == "Pública"
        assert label_for(UserRole, "public", "pt") == "public"

    def test_unknown_value_returns_raw(self):
        assert label_for(Typology, "hovercraft", "pt") == "hovercraft"

    def test_all_labels(self):
        assert set(all_labels(Typology, "mare")) == {"Moinho de maré", "Tide mill"}
        assert all_labels(Typology, "nope") == []


class TestResolveTranslation:
    def test_exact(self):
        items = [_T("pt", "Moinho"), _T("en", "Mill")]
        assert resolve_translation(items, "en", "pt").title == "Mill"

    def test_default_locale_fallback(self):
        items = [_T("fr", "Moulin"), _T("pt", "Moinho")]
        assert resolve_translation(items, "en", "pt").title == "Moinho"

    def test_first_available(self):
        assert resolve_translation([_T("fr", "Moulin")], "en", "pt").title == "Moulin"

    def test_empty(self):
        assert resolve_translation([], "en", "pt") is None
