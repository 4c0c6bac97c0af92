"""
Tests for the key-driven settings panel.
"""

import pytest

from gesture_presenter.settings import MAX_CODE_LENGTH, SettingsPanel


def type_text(panel, text):
    for ch in text:
        assert panel.handle_key(ord(ch))


class TestSettingsPanel:

    @pytest.fixture
    def panel(self):
        return SettingsPanel(pairing_code="OLD")

    def test_hidden_panel_ignores_keys(self, panel):
        assert not panel.handle_key(ord("a"))
        assert panel.pairing_code == "OLD"

    def test_open_seeds_draft(self, panel):
        panel.open()
        assert panel.visible
        assert panel.draft == "OLD"

    def test_edit_and_save(self, panel):
        panel.open()
        for _ in range(3):
            assert panel.handle_key(8)
        type_text(panel, "New42")
        assert panel.handle_key(13)
        assert panel.pairing_code == "New42"
        assert not panel.visible

    def test_escape_discards_edit(self, panel):
        panel.open()
        type_text(panel, "X")
        assert panel.handle_key(27)
        assert panel.pairing_code == "OLD"
        assert not panel.visible

    def test_tab_toggles_flipped(self, panel):
        panel.open()
        assert panel.handle_key(9)
        assert panel.flipped
        assert panel.handle_key(9)
        assert not panel.flipped

    def test_unhandled_keys(self, panel):
        panel.open()
        assert not panel.handle_key(255)
        assert not panel.handle_key(ord("-"))
        assert panel.draft == "OLD"

    def test_code_length_is_capped(self):
        panel = SettingsPanel()
        panel.open()
        type_text(panel, "A" * (MAX_CODE_LENGTH + 5))
        assert len(panel.draft) == MAX_CODE_LENGTH

    def test_can_notify(self, panel):
        assert panel.can_notify
        panel.open()
        assert not panel.can_notify
        panel.close()
        assert panel.can_notify
        assert not SettingsPanel().can_notify

    def test_initial_code_is_stripped(self):
        assert SettingsPanel(pairing_code="  AB ").pairing_code == "AB"
