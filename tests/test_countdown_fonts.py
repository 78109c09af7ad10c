"""Tests for one-time font registration."""

import threading

import pytest

from src.components.countdown_errors import ConfigurationWarning
from src.components.countdown_fonts import FontRegistry, FontSpec, FontTable


@pytest.fixture
def empty_registry():
    return FontRegistry(candidates={})


class TestFontTable:

    def test_resolves_registered_family(self):
        table = FontTable(paths={'A': '/fonts/a.ttf', 'B': '/fonts/b.ttf'})
        assert table.resolve('B') == '/fonts/b.ttf'

    def test_unknown_family_uses_any_registered_font(self):
        table = FontTable(paths={'A': '/fonts/a.ttf'})
        assert table.resolve('Missing') == '/fonts/a.ttf'

    def test_override_family_wins(self):
        table = FontTable(paths={'A': '/fonts/a.ttf', 'Custom': '/fonts/c.ttf'}, override_family='Custom')
        assert table.resolve('A') == '/fonts/c.ttf'

    def test_empty_table(self):
        assert FontTable().resolve('A') is None


class TestFontRegistry:

    def test_registers_lazily(self, empty_registry):
        assert not empty_registry.is_registered
        empty_registry.get_font(FontSpec('Anything', 20))
        assert empty_registry.is_registered

    def test_registration_happens_once(self, empty_registry):
        first = empty_registry.register()
        second = empty_registry.register(font_path='/ignored/after/first.ttf')
        assert first is second

    def test_concurrent_callers_see_one_table(self, empty_registry):
        tables = []

        def register():
            tables.append(empty_registry.register())

        threads = [threading.Thread(target=register) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(tables) == 8
        assert all(table is tables[0] for table in tables)

    def test_missing_custom_font_is_a_warning(self, empty_registry, tmp_path):
        with pytest.warns(ConfigurationWarning):
            table = empty_registry.register(font_path=str(tmp_path / 'missing.ttf'), font_family='Brand')

        assert table.override_family is None
        assert 'Brand' not in table.paths

    def test_falls_back_to_builtin_font(self, empty_registry):
        font = empty_registry.get_font(FontSpec('Anything', 24))
        assert font.getlength('88') > 0
