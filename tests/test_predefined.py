"""Tests for built-in measurement methods and settings."""

from __future__ import annotations

import pytest

from vegx.config import Settings
from vegx.errors import ConfigurationError
from vegx.models import AttributeType
from vegx.predefined import available_methods, predefined_measurement_method


class TestPredefinedMethods:
    """Tests for the predefined method table."""

    def test_available_methods(self) -> None:
        assert available_methods() == [
            "Plant cover/%",
            "Plant frequency/%",
            "Individual plant counts",
            "DBH/cm",
            "Plant height/m",
            "Stratum height/m",
        ]

    @pytest.mark.parametrize("name", available_methods())
    def test_every_method_is_quantitative(self, name: str) -> None:
        definition = predefined_measurement_method(name)
        assert definition.name == name
        assert definition.attribute_type is AttributeType.QUANTITATIVE
        assert len(definition.attributes) == 1

    def test_cover_range(self) -> None:
        attribute = predefined_measurement_method("Plant cover/%").attributes[0]
        assert (attribute.lower_limit, attribute.upper_limit, attribute.unit) == (0, 100, "%")

    def test_returns_fresh_definitions(self) -> None:
        first = predefined_measurement_method("DBH/cm")
        first.attributes[0].upper_limit = 5
        assert predefined_measurement_method("DBH/cm").attributes[0].upper_limit is None

    def test_unknown_name(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown predefined method 'Basal area'"):
            predefined_measurement_method("Basal area")


class TestSettings:
    """Tests for environment-driven defaults."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("VEGX_DATE_FORMAT", "VEGX_MISSING_VALUES", "VEGX_VERBOSE", "VEGX_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)

        assert settings.date_format == "%Y-%m-%d"
        assert settings.missing_values == ["", "0"]
        assert settings.verbose is True
        assert settings.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VEGX_DATE_FORMAT", "%d.%m.%Y")
        monkeypatch.setenv("VEGX_MISSING_VALUES", '["", "NA"]')
        monkeypatch.setenv("VEGX_VERBOSE", "false")
        settings = Settings(_env_file=None)

        assert settings.date_format == "%d.%m.%Y"
        assert settings.missing_values == ["", "NA"]
        assert settings.verbose is False
