"""Tests for settings and the rules configuration."""

from skillforge.config import FateMode, RulesConfig, Settings, get_settings
from skillforge.pipeline.context import DerivationContext
from skillforge.pipeline.orchestrator import DerivationPipeline


class TestSettings:
    """Tests for environment driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SKILLFORGE_FATE_MODE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.fate_mode == FateMode.EVERYONE
        assert settings.fate_default_base == 50
        assert settings.outnumbered_step == -10
        assert settings.mastery_max_target is None

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("SKILLFORGE_FATE_MODE", "pconly")
        monkeypatch.setenv("SKILLFORGE_OUTNUMBERED_STEP", "-5")
        settings = get_settings()
        assert settings.fate_mode == FateMode.PC_ONLY
        assert settings.outnumbered_step == -5

    def test_cached(self):
        assert get_settings() is get_settings()


class TestRulesConfig:
    """Tests for the immutable rules handed to the pipeline."""

    def test_from_settings(self):
        settings = Settings(_env_file=None, fate_mode="trait_only", fate_requires_mystery=True)
        rules = RulesConfig.from_settings(settings)
        assert rules.fate_mode == FateMode.TRAIT_ONLY
        assert rules.fate_requires_mystery

    def test_context_from_settings(self):
        context = DerivationContext.from_settings(Settings(_env_file=None, outnumbered_step=-7))
        assert context.rules.outnumbered_step == -7
        assert context.combat is None

    def test_rules_are_per_context(self, make_owner):
        """Two contexts with different rules derive independently."""
        owner = make_owner()
        everyone = DerivationPipeline(DerivationContext()).run(owner)
        nobody = DerivationPipeline(
            DerivationContext(rules=RulesConfig(fate_mode=FateMode.NONE))
        ).run(owner)
        assert everyone.stack("s-sword", "fate").effective == 55
        assert nobody.stack("s-sword", "fate").effective is None
