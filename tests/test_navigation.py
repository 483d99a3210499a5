"""Tests for the navigation state machine."""

import json
from datetime import timedelta

import pytest

from alltz.config.preferences import ColorTheme, NameMode, TimeFormat
from alltz.config.store import AppConfig, ConfigStore, ZoneSlot
from alltz.ui.navigation import (
    Cancel,
    ChooseCandidate,
    ClearLabel,
    Confirm,
    CycleTheme,
    DeleteChar,
    HelpMode,
    MoveHighlight,
    MoveSelection,
    Navigator,
    NormalMode,
    RemoveZone,
    RenameMode,
    ResetToNow,
    Scrub,
    SearchMode,
    SetText,
    StartRename,
    StartSearch,
    Tick,
    ToggleDate,
    ToggleHelp,
    ToggleNameMode,
    ToggleSunTimes,
    ToggleTimeFormat,
    TypeChar,
)


@pytest.fixture
def navigator(registry_factory, store, now):
    registry = registry_factory("Los Angeles", "London", "Tokyo")
    return Navigator(registry, store=store, now=now)


def _names(navigator):
    return [entry.city.name for entry in navigator.registry]


def _type(navigator, text):
    for ch in text:
        navigator.dispatch(TypeChar(ch))


# ---------------------------------------------------------------------------
# Scrubbing
# ---------------------------------------------------------------------------


class TestScrub:
    def test_quarter_steps_add_up_to_an_hour(self, navigator, now):
        for _ in range(4):
            navigator.dispatch(Scrub(15))
        quarters = navigator.state.scrub

        navigator.dispatch(ResetToNow())
        navigator.dispatch(Scrub(60))

        assert quarters == navigator.state.scrub == now + timedelta(hours=1)

    def test_scrub_is_sticky_across_ticks(self, navigator, now):
        navigator.dispatch(Scrub(-1))
        navigator.dispatch(Tick(now + timedelta(seconds=30)))

        assert navigator.state.scrub == now - timedelta(minutes=1)
        assert navigator.state.now == now + timedelta(seconds=30)
        assert not navigator.state.following_now

    def test_tick_moves_scrub_while_following(self, navigator, now):
        later = now + timedelta(seconds=5)
        navigator.dispatch(Tick(later))
        assert navigator.state.scrub == later

    def test_reset_to_now(self, navigator, now):
        navigator.dispatch(Scrub(600))
        navigator.dispatch(Tick(now + timedelta(minutes=2)))
        navigator.dispatch(ResetToNow())

        assert navigator.state.scrub == now + timedelta(minutes=2)
        assert navigator.state.following_now

    def test_scrub_does_not_persist(self, navigator, config_file):
        assert navigator.dispatch(Scrub(60)) is False
        assert not config_file.exists()

    def test_order_is_independent_of_scrub(self, registry_factory, store, now):
        # Apia/Chatham swap order between July and January
        navigator = Navigator(registry_factory("Apia", "Chatham Islands"), store=store, now=now)
        before = _names(navigator)

        navigator.dispatch(Scrub(60 * 24 * 180))
        navigator.render(120)

        assert _names(navigator) == before == ["Chatham Islands", "Apia"]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelection:
    def test_clamps_at_both_ends(self, navigator):
        assert navigator.dispatch(MoveSelection(-1)) is False
        assert navigator.state.selected_index == 0

        navigator.dispatch(MoveSelection(1))
        navigator.dispatch(MoveSelection(1))
        assert navigator.dispatch(MoveSelection(1)) is False
        assert navigator.state.selected_index == 2

    def test_initial_selection_is_clamped(self, registry_factory, now):
        navigator = Navigator(registry_factory("London", "Tokyo"), now=now, selected_index=9)
        assert navigator.state.selected_index == 1

    def test_remove_last_row_moves_selection_up(self, navigator):
        navigator.dispatch(MoveSelection(2))
        navigator.dispatch(RemoveZone())
        assert navigator.state.selected_index == 1
        assert _names(navigator) == ["Los Angeles", "London"]

    def test_remove_until_empty(self, navigator):
        for _ in range(3):
            assert navigator.dispatch(RemoveZone()) is True
        assert navigator.state.selected_index is None

        # Zone commands are no-ops with nothing selected
        assert navigator.dispatch(RemoveZone()) is False
        assert navigator.dispatch(MoveSelection(1)) is False
        assert navigator.dispatch(ClearLabel()) is False
        navigator.dispatch(StartRename())
        assert isinstance(navigator.mode, NormalMode)

    def test_selection_follows_city_on_resort(self, registry_factory, store, now):
        navigator = Navigator(registry_factory("Apia", "Chatham Islands"), store=store, now=now)
        navigator.dispatch(MoveSelection(1))
        assert navigator.registry[navigator.state.selected_index].city.name == "Apia"

        navigator.dispatch(Tick(now + timedelta(days=180)))

        assert navigator.registry[navigator.state.selected_index].city.name == "Apia"

    def test_selection_persists(self, navigator, config_file):
        assert navigator.dispatch(MoveSelection(1)) is True
        assert json.loads(config_file.read_text())["selected_zone_index"] == 1


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearchMode:
    def test_search_and_pick_second_london(self, navigator, config_file):
        navigator.dispatch(StartSearch())
        _type(navigator, "london")

        mode = navigator.mode
        assert isinstance(mode, SearchMode)
        assert [c.display for c in mode.matches[:2]] == ["London, United Kingdom", "London, Canada"]

        navigator.dispatch(MoveHighlight(-1))
        assert navigator.mode.highlighted == 0
        navigator.dispatch(MoveHighlight(1))
        assert navigator.mode.highlighted == 1

        assert navigator.dispatch(Confirm()) is True
        assert isinstance(navigator.mode, NormalMode)

        selected = navigator.registry[navigator.state.selected_index]
        assert selected.city.display == "London, Canada"
        assert "London, Canada" in json.loads(config_file.read_text())["zones"]

    def test_editing_query_resets_highlight(self, navigator):
        navigator.dispatch(StartSearch())
        _type(navigator, "lon")
        navigator.dispatch(MoveHighlight(1))
        navigator.dispatch(DeleteChar())

        assert navigator.mode.query == "lo"
        assert navigator.mode.highlighted == 0

        navigator.dispatch(SetText("tokyo"))
        assert navigator.mode.matches[0].city.name == "Tokyo"

    def test_choose_candidate_by_number(self, navigator):
        navigator.dispatch(StartSearch())
        navigator.dispatch(SetText("kolkata"))

        assert navigator.dispatch(ChooseCandidate(1)) is True
        assert "Mumbai" in _names(navigator)

    def test_choose_out_of_range_stays_in_search(self, navigator):
        navigator.dispatch(StartSearch())
        navigator.dispatch(SetText("tokyo"))
        assert navigator.dispatch(ChooseCandidate(50)) is False
        assert isinstance(navigator.mode, SearchMode)

    def test_confirm_without_matches(self, navigator):
        navigator.dispatch(StartSearch())
        navigator.dispatch(SetText("zzz"))
        assert navigator.dispatch(Confirm()) is False
        assert isinstance(navigator.mode, SearchMode)

    def test_cancel_changes_nothing(self, navigator, config_file):
        navigator.dispatch(StartSearch())
        _type(navigator, "ber")
        assert navigator.dispatch(Cancel()) is False

        assert isinstance(navigator.mode, NormalMode)
        assert _names(navigator) == ["Los Angeles", "London", "Tokyo"]
        assert not config_file.exists()

    def test_scrub_keys_ignored_while_searching(self, navigator, now):
        navigator.dispatch(StartSearch())
        navigator.dispatch(Scrub(60))
        assert navigator.state.scrub == now


# ---------------------------------------------------------------------------
# Rename
# ---------------------------------------------------------------------------


class TestRenameMode:
    def test_rename_then_clear_is_idempotent(self, navigator):
        navigator.dispatch(MoveSelection(2))
        navigator.dispatch(StartRename())
        navigator.dispatch(SetText("Office"))
        assert navigator.dispatch(Confirm()) is True
        assert navigator.registry[2].custom_label == "Office"

        assert navigator.dispatch(ClearLabel()) is True
        assert navigator.registry[2].custom_label is None
        assert navigator.dispatch(ClearLabel()) is False
        assert navigator.registry[2].city.name == "Tokyo"

    def test_buffer_starts_from_current_label(self, navigator):
        navigator.registry.rename(0, "Home")
        navigator.dispatch(StartRename())
        assert navigator.mode == RenameMode(buffer="Home", original="Home")

        navigator.dispatch(DeleteChar())
        navigator.dispatch(TypeChar("!"))
        assert navigator.mode.buffer == "Hom!"

    def test_empty_buffer_clears_label(self, navigator):
        navigator.registry.rename(0, "Home")
        navigator.dispatch(StartRename())
        navigator.dispatch(SetText(""))
        assert navigator.dispatch(Confirm()) is True
        assert navigator.registry[0].custom_label is None

    def test_cancel_discards(self, navigator):
        navigator.dispatch(StartRename())
        _type(navigator, "Nope")
        assert navigator.dispatch(Cancel()) is False
        assert navigator.registry[0].custom_label is None

    def test_unchanged_label_does_not_persist(self, navigator, config_file):
        navigator.dispatch(StartRename())
        assert navigator.dispatch(Confirm()) is False
        assert not config_file.exists()


# ---------------------------------------------------------------------------
# Help overlay
# ---------------------------------------------------------------------------


class TestHelp:
    def test_help_wraps_and_restores_mode(self, navigator):
        navigator.dispatch(StartSearch())
        _type(navigator, "tok")
        navigator.dispatch(ToggleHelp())

        assert isinstance(navigator.mode, HelpMode)
        navigator.dispatch(TypeChar("x"))
        navigator.dispatch(RemoveZone())
        assert len(navigator.registry) == 3

        navigator.dispatch(Cancel())
        assert navigator.mode.query == "tok"

    @pytest.mark.parametrize("dismiss", [ToggleHelp(), Cancel(), Confirm()])
    def test_dismiss_commands(self, navigator, dismiss):
        navigator.dispatch(ToggleHelp())
        navigator.dispatch(dismiss)
        assert isinstance(navigator.mode, NormalMode)

    def test_ticks_still_processed(self, navigator, now):
        navigator.dispatch(ToggleHelp())
        navigator.dispatch(Tick(now + timedelta(seconds=1)))
        assert navigator.state.scrub == now + timedelta(seconds=1)


# ---------------------------------------------------------------------------
# Preferences and persistence
# ---------------------------------------------------------------------------


class TestPreferences:
    def test_toggles_persist(self, navigator, config_file):
        assert navigator.dispatch(ToggleTimeFormat()) is True
        assert navigator.dispatch(ToggleNameMode()) is True
        assert navigator.dispatch(ToggleDate()) is True
        assert navigator.dispatch(ToggleSunTimes()) is True
        assert navigator.dispatch(CycleTheme()) is True

        prefs = navigator.prefs
        assert prefs.time_format is TimeFormat.TWELVE
        assert prefs.name_mode is NameMode.FULL
        assert prefs.show_date and not prefs.show_sun_times
        assert prefs.theme is ColorTheme.OCEAN

        saved = json.loads(config_file.read_text())
        assert saved["display_format"] == "TwelveHour"
        assert saved["color_theme"] == "Ocean"

    def test_theme_cycle_wraps(self, navigator):
        for _ in range(len(ColorTheme)):
            navigator.dispatch(CycleTheme())
        assert navigator.prefs.theme is ColorTheme.DEFAULT

    def test_save_failure_becomes_warning(self, registry_factory, tmp_path, now):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        navigator = Navigator(
            registry_factory("London"), store=ConfigStore(blocker / "config.json"), now=now
        )

        assert navigator.dispatch(ToggleDate()) is True
        assert navigator.prefs.show_date

        warnings = navigator.pop_warnings()
        assert len(warnings) == 1
        assert "Could not persist" in warnings[0]
        assert navigator.pop_warnings() == []

    def test_from_config(self, database, store, now):
        config = AppConfig.default()
        navigator = Navigator.from_config(config, database, store=store, now=now)
        assert len(navigator.registry) == 7
        assert navigator.state.selected_index == 0

    def test_select_city_adds_missing(self, navigator, database, config_file):
        index = navigator.select_city(database.get("Kathmandu"))
        assert navigator.registry[index].city.name == "Kathmandu"
        assert navigator.state.selected_index == index
        assert "Kathmandu" in json.loads(config_file.read_text())["zones"]

        assert navigator.select_city(database.get("London")) == 1

    def test_unknown_config_zones_are_kept(self, database, store, config_file, now):
        config = AppConfig(zones=(ZoneSlot("London"), ZoneSlot("El Dorado")))
        navigator = Navigator.from_config(config, database, store=store, now=now)
        assert _names(navigator) == ["London"]

        navigator.dispatch(ToggleDate())

        assert json.loads(config_file.read_text())["zones"] == ["London", "El Dorado"]
