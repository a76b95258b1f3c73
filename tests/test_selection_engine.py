"""Tests for the selection engine state machine."""
import pytest

from selector.components.matcher import TokenMatcher
from selector.components.selection_engine import (
    CLIPBOARD,
    PRIMARY,
    SelectionEngine,
    parse_accelerator,
)
from selector.components.selection_models import (
    CandidateSet,
    ConfigurationError,
    KeyPress,
    OutcomeKind,
    PasteDelivery,
)
from selector.components.tokenizer import tokenize


class TestFiltering:
    def test_empty_query_lists_everything(self, make_engine):
        engine = make_engine()
        assert engine.filtered == (0, 1, 2)
        assert engine.selected_index == 0

    def test_whitespace_query_lists_everything_in_order(self, make_engine):
        engine = make_engine(query="   ", sorting=True)
        assert engine.filtered == (0, 1, 2)

    def test_query_keeps_original_order_without_sorting(self, make_engine):
        engine = make_engine(query="fi")
        assert engine.filtered == (0, 2)

    def test_sorting_orders_by_distance(self, make_engine):
        engine = make_engine(query="fi", sorting=True)
        assert engine.filtered == (2, 0)

    def test_typing_refilters(self, make_engine, type_text):
        engine = make_engine()
        type_text(engine, "fi")
        assert engine.query == "fi"
        assert engine.filtered == (0, 2)

    def test_every_filtered_index_matches(self, make_engine, many):
        for query in ["", "item", "0", "1 2", "item 2", "zz"]:
            engine = make_engine(many, query=query)
            tokens = tokenize(query)
            assert all(
                TokenMatcher().matches(tokens, many[index]) for index in engine.filtered
            )

    def test_selection_is_clamped_after_refilter(self, make_engine, press, type_text):
        engine = make_engine()
        press(engine, "End")
        assert engine.selected_index == 2
        type_text(engine, "f")
        assert engine.filtered == (0, 2)
        assert engine.selected_index == 1

    def test_selection_floors_at_zero_when_nothing_matches(self, make_engine, press, type_text):
        engine = make_engine()
        press(engine, "End")
        type_text(engine, "zzz")
        assert engine.filtered == ()
        assert engine.selected_index == 0
        assert engine.selected_candidate is None

    def test_initial_selection_by_original_index(self, make_engine):
        assert make_engine(selected_index=2).selected_index == 2
        engine = make_engine(query="fi", selected_index=2)
        assert engine.selected_index == 1
        assert engine.selected_candidate == 2

    def test_initial_selection_not_in_list_starts_at_top(self, make_engine):
        engine = make_engine(query="fi", selected_index=1)
        assert engine.selected_index == 0

    def test_matcher_errors_propagate(self, apps):
        class Broken:
            def matches(self, tokens, candidate, context):
                raise RuntimeError("bad context")

        engine = SelectionEngine(apps, Broken())
        with pytest.raises(RuntimeError):
            engine.start()

    def test_context_is_passed_to_matcher(self, apps):
        seen = []

        class Recording:
            def matches(self, tokens, candidate, context):
                seen.append(context)
                return True

        marker = object()
        SelectionEngine(apps, Recording(), marker).start()
        assert seen == [marker, marker, marker]


class TestNavigation:
    def test_down_wraps(self, make_engine, press):
        engine = make_engine()
        positions = []
        for _ in range(3):
            press(engine, "Down")
            positions.append(engine.selected_index)
        assert positions == [1, 2, 0]

    def test_up_wraps(self, make_engine, press):
        engine = make_engine()
        press(engine, "Up")
        assert engine.selected_index == 2
        press(engine, "Up")
        assert engine.selected_index == 1

    def test_emacs_and_tab_aliases(self, make_engine, press):
        engine = make_engine()
        press(engine, "n", control=True)
        assert engine.selected_index == 1
        press(engine, "p", control=True)
        assert engine.selected_index == 0
        press(engine, "ISO_Left_Tab", shift=True)
        assert engine.selected_index == 2
        press(engine, "Tab", shift=True)
        assert engine.selected_index == 1
        assert engine.query == ""

    def test_home_and_end(self, make_engine, press):
        engine = make_engine()
        press(engine, "End")
        assert engine.selected_index == 2
        press(engine, "Home")
        assert engine.selected_index == 0
        press(engine, "KP_End")
        assert engine.selected_index == 2

    def test_page_keys(self, make_engine, many, grid_layout, press):
        engine = make_engine(many, layout=grid_layout)
        assert engine.layout.capacity == 10
        assert engine.layout.rows == 5

        press(engine, "Page_Down")
        assert engine.selected_index == 10
        press(engine, "Page_Down", control=True)
        assert engine.selected_index == 15
        press(engine, "Page_Up")
        assert engine.selected_index == 5
        press(engine, "Page_Up", control=True)
        assert engine.selected_index == 0
        press(engine, "Page_Up")
        assert engine.selected_index == 0
        press(engine, "End")
        press(engine, "Page_Down")
        assert engine.selected_index == 29
        press(engine, "Page_Down", control=True)
        assert engine.selected_index == 29

    def test_navigation_on_empty_list_is_a_no_op(self, make_engine, press):
        engine = make_engine(CandidateSet())
        for key in ["Up", "Down", "Page_Up", "Page_Down", "Home", "End", "Tab"]:
            assert press(engine, key) is None
            assert engine.selected_index == 0


class TestOutcomes:
    def test_accept_selects_highlighted(self, make_engine, press):
        engine = make_engine()
        press(engine, "Down")
        result = press(engine, "Return")
        assert result.kind is OutcomeKind.SELECTED
        assert result.index == 1
        assert result.outcome.shift is False
        assert engine.finished

    def test_accept_reports_original_index_after_sorting(self, make_engine, press):
        engine = make_engine(query="fi", sorting=True)
        result = press(engine, "KP_Enter")
        assert result.index == 2

    def test_shift_accept_carries_modifier(self, make_engine, press):
        result = press(make_engine(), "Return", shift=True)
        assert result.outcome.shift is True

    def test_accept_without_match_is_custom_input(self, make_engine, press, type_text):
        engine = make_engine()
        type_text(engine, "htop")
        result = press(engine, "Return")
        assert result.kind is OutcomeKind.CUSTOM_INPUT
        assert result.outcome.text == "htop"
        assert result.query == "htop"

    def test_accept_on_empty_set_is_custom_input(self, make_engine, press):
        result = press(make_engine(CandidateSet()), "Return")
        assert result.kind is OutcomeKind.CUSTOM_INPUT
        assert result.outcome.text == ""

    def test_tab_with_single_match_selects_it(self, make_engine, press):
        engine = make_engine(query="term")
        result = press(engine, "Tab")
        assert result.kind is OutcomeKind.SELECTED
        assert result.index == 1

    def test_double_tab_on_empty_list_goes_to_next_list(self, make_engine, press):
        engine = make_engine(query="zzz")
        assert press(engine, "Tab") is None
        result = press(engine, "Tab")
        assert result.kind is OutcomeKind.NEXT_LIST

    def test_tabs_must_be_consecutive(self, make_engine, press):
        engine = make_engine(query="zzz")
        press(engine, "Tab")
        press(engine, "Left")
        assert press(engine, "Tab") is None
        assert not engine.finished

    def test_tab_with_several_matches_moves_down(self, make_engine, press):
        engine = make_engine()
        assert press(engine, "Tab") is None
        assert engine.selected_index == 1

    def test_shift_slash_goes_to_next_list(self, make_engine, press):
        result = press(make_engine(), "slash", shift=True, text="?")
        assert result.kind is OutcomeKind.NEXT_LIST
        assert result.index == 0

    def test_question_keyval_counts_as_shift_slash(self, make_engine, press):
        result = press(make_engine(), "question", shift=True, text="?")
        assert result.kind is OutcomeKind.NEXT_LIST

    def test_shift_delete_removes_highlighted_entry(self, make_engine, press):
        engine = make_engine()
        press(engine, "End")
        result = press(engine, "Delete", shift=True)
        assert result.kind is OutcomeKind.DELETE_ENTRY
        assert result.index == 2

    def test_shift_delete_without_highlight_does_nothing(self, make_engine, press):
        engine = make_engine(query="zzz")
        engine.feed(KeyPress("Left"))
        assert press(engine, "Delete", shift=True) is None
        assert engine.query == "zzz"
        assert not engine.finished

    def test_alt_digit_is_quick_jump(self, make_engine, press):
        result = press(make_engine(), "3", alt=True, text="3")
        assert result.kind is OutcomeKind.QUICK_JUMP
        assert result.index == 2

    def test_alt_zero_is_not_a_jump(self, make_engine, press):
        engine = make_engine()
        assert press(engine, "0", alt=True, text="0") is None
        assert engine.query == ""

    def test_escape_cancels_and_keeps_query(self, make_engine, press, type_text):
        engine = make_engine()
        type_text(engine, "fire")
        result = press(engine, "Escape")
        assert result.kind is OutcomeKind.CANCELLED
        assert result.query == "fire"

    def test_global_accelerator_cancels(self, make_engine, press, type_text):
        engine = make_engine(cancel_keys=[parse_accelerator("Control+q")])
        type_text(engine, "q")
        assert engine.query == "q"
        result = press(engine, "q", control=True)
        assert result.kind is OutcomeKind.CANCELLED

    def test_super_accelerator_cancels_without_typing(self, make_engine, press):
        engine = make_engine(cancel_keys=[parse_accelerator("Super+w")])
        assert press(engine, "w", text="w") is None
        assert engine.query == "w"
        result = press(engine, "w", text="w", super=True)
        assert result.kind is OutcomeKind.CANCELLED
        assert result.query == "w"

    def test_events_after_finish_are_ignored(self, make_engine, press):
        engine = make_engine()
        first = press(engine, "Escape")
        assert press(engine, "Return") is first


class TestAutoAccept:
    def test_single_match_after_typing_is_selected(self, make_engine, type_text):
        engine = make_engine(auto_accept=True)
        result = type_text(engine, "t")
        assert result.kind is OutcomeKind.SELECTED
        assert result.index == 1
        assert result.query == "t"

    def test_initial_query_can_finish_immediately(self, apps):
        engine = SelectionEngine(apps, query="term", auto_accept=True)
        result = engine.start()
        assert result.kind is OutcomeKind.SELECTED
        assert result.index == 1

    def test_disabled_by_default(self, make_engine, type_text):
        engine = make_engine()
        assert type_text(engine, "t") is None


class TestEditing:
    def test_cursor_movement_and_deletion(self, make_engine, press, type_text):
        engine = make_engine()
        type_text(engine, "abc")
        press(engine, "Left")
        press(engine, "BackSpace")
        assert (engine.query, engine.cursor) == ("ac", 1)
        press(engine, "a", control=True)
        assert engine.cursor == 0
        press(engine, "Delete")
        assert (engine.query, engine.cursor) == ("c", 0)
        press(engine, "e", control=True)
        assert engine.cursor == 1
        press(engine, "u", control=True)
        assert (engine.query, engine.cursor) == ("", 0)

    def test_insert_in_the_middle(self, make_engine, press, type_text):
        engine = make_engine()
        type_text(engine, "fx")
        press(engine, "Left")
        type_text(engine, "ire")
        assert engine.query == "firex"
        assert engine.cursor == 4

    def test_backspace_at_start_keeps_query(self, make_engine, press):
        engine = make_engine(query="fi")
        press(engine, "Home")
        press(engine, "a", control=True)
        press(engine, "BackSpace")
        assert engine.query == "fi"
        assert not engine.dirty

    def test_cursor_is_clamped(self, make_engine, press):
        engine = make_engine(query="ab")
        press(engine, "Right")
        assert engine.cursor == 2
        press(engine, "b", control=True)
        press(engine, "b", control=True)
        press(engine, "b", control=True)
        assert engine.cursor == 0

    def test_unprintable_text_is_ignored(self, make_engine, press):
        engine = make_engine()
        press(engine, "Escape_like", text="\x1b")
        assert engine.query == ""


class TestPaste:
    def test_paste_keys_request_selection(self, apps, press):
        requests = []
        engine = SelectionEngine(apps, on_paste_request=requests.append)
        engine.start()
        press(engine, "v", control=True)
        press(engine, "Insert", shift=True)
        press(engine, "Insert")
        assert requests == [CLIPBOARD, PRIMARY, CLIPBOARD]
        assert engine.query == ""

    def test_paste_request_without_source_is_harmless(self, make_engine, press):
        engine = make_engine()
        assert press(engine, "v", control=True) is None

    def test_delivery_is_cut_at_first_newline(self, make_engine):
        engine = make_engine()
        engine.feed(PasteDelivery("fi\nsecond line"))
        assert engine.query == "fi"
        assert engine.filtered == (0, 2)

    def test_delivery_inserts_at_cursor(self, make_engine, press):
        engine = make_engine(query="fox")
        press(engine, "a", control=True)
        engine.feed(PasteDelivery("fire"))
        assert engine.query == "firefox"
        assert engine.cursor == 4

    def test_undecodable_bytes_are_dropped(self, make_engine):
        engine = make_engine()
        engine.feed(PasteDelivery(b"fi\xff\xfe"))
        assert engine.query == "fi"

    def test_empty_delivery_is_ignored(self, make_engine):
        engine = make_engine(query="x")
        assert engine.feed(PasteDelivery(None)) is None
        assert engine.feed(PasteDelivery("\nrest")) is None
        assert engine.query == "x"


class TestPageView:
    def test_first_page(self, make_engine, many, grid_layout):
        engine = make_engine(many, layout=grid_layout)
        page = engine.page()
        assert page.offset == 0
        assert [row.index for row in page.rows] == list(range(10))
        assert page.rows[0].highlighted
        assert not page.has_previous
        assert page.has_next

    def test_offset_is_stable_inside_a_page(self, make_engine, many, grid_layout, press):
        engine = make_engine(many, layout=grid_layout)
        for _ in range(9):
            press(engine, "Down")
            assert engine.page().offset == 0
        press(engine, "Down")
        assert engine.page().offset == 10
        press(engine, "Up")
        assert engine.selected_index == 9
        assert engine.page().offset == 0

    def test_last_page(self, make_engine, many, grid_layout, press):
        engine = make_engine(many, layout=grid_layout)
        press(engine, "End")
        page = engine.page()
        assert page.offset == 20
        assert [row.position for row in page.rows] == list(range(20, 30))
        assert page.rows[-1].highlighted
        assert page.has_previous
        assert not page.has_next

    def test_single_page_has_no_arrows(self, make_engine):
        page = make_engine().page()
        assert [row.text for row in page.rows] == ["Firefox", "Terminal", "Files"]
        assert not page.has_previous
        assert not page.has_next

    def test_empty_page(self, make_engine):
        engine = make_engine(query="zzz")
        page = engine.page()
        assert page.rows == []
        assert not engine.needs_redraw


class TestRun:
    def test_run_consumes_events_until_outcome(self, apps):
        engine = SelectionEngine(apps)
        events = iter([KeyPress("Down"), KeyPress("Down"), KeyPress("Return"), KeyPress("Up")])
        result = engine.run(events)
        assert result.kind is OutcomeKind.SELECTED
        assert result.index == 2
        assert next(events) == KeyPress("Up")

    def test_run_refilters_before_each_event(self, apps):
        engine = SelectionEngine(apps, sorting=True)
        events = [KeyPress("f", text="f"), KeyPress("i", text="i"), KeyPress("Return")]
        result = engine.run(events)
        assert result.index == 2
        assert result.query == "fi"

    def test_closed_source_cancels(self, apps):
        result = SelectionEngine(apps).run([])
        assert result.kind is OutcomeKind.CANCELLED

    def test_auto_accept_finishes_before_reading(self, apps):
        def events():
            raise AssertionError("no event should be read")
            yield  # pragma: no cover

        result = SelectionEngine(apps, query="term", auto_accept=True).run(events())
        assert result.index == 1


class TestParseAccelerator:
    def test_modifiers(self):
        assert parse_accelerator("Control+Shift+q") == KeyPress("q", shift=True, control=True)
        assert parse_accelerator("Alt+F1") == KeyPress("F1", alt=True)
        assert parse_accelerator("mod1+space") == KeyPress("space", alt=True)
        assert parse_accelerator("Super+w") == KeyPress("w", super=True)
        assert parse_accelerator("mod4+F12") == KeyPress("F12", super=True)

    @pytest.mark.parametrize("combo", ["", "Hyper+x", "+"])
    def test_rejects_bad_combos(self, combo):
        with pytest.raises(ConfigurationError):
            parse_accelerator(combo)
