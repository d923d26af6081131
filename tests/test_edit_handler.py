import pytest

from recordnow.editor import (
    ARROW_DOWN,
    ARROW_UP,
    BACKSPACE,
    ENTER,
    TAB,
    BlockStore,
    BlockType,
    CursorRequest,
    EditEventHandler,
    KeyInput,
    parse_table,
)
from recordnow.editor.edit_handler import TAB_SPACES, is_table_trigger, table_headers_from_row


@pytest.fixture
def changes():
    return []


def make(text, changes=None):
    store = BlockStore.from_markdown(text, on_change=(changes.append if changes is not None else None))
    return store, EditEventHandler(store)


def contents(store):
    return [b.content for b in store.blocks]


# -- Enter


def test_enter_splits_text_block_at_caret(changes):
    store, handler = make("hello world", changes)
    assert handler.handle_key(0, KeyInput(ENTER, caret=5))
    assert contents(store) == ["hello", " world"]
    assert store.take_cursor_request() == CursorRequest(store.blocks[1].id, 0)
    assert changes[-1] == "hello\n world"


def test_enter_replaces_selection():
    store, handler = make("abcdef")
    handler.handle_key(0, KeyInput(ENTER, caret=4, selection_end=2))
    assert contents(store) == ["ab", "ef"]


def test_shift_enter_is_left_to_the_widget():
    store, handler = make("abc")
    assert not handler.handle_key(0, KeyInput(ENTER, shift=True, caret=1))
    assert contents(store) == ["abc"]


def test_enter_in_open_code_block_keeps_indent():
    store, handler = make("```py\n    x = 1")
    block = store.blocks[0]
    assert block.type is BlockType.CODE_OPEN
    caret = len(block.content)
    assert handler.handle_key(0, KeyInput(ENTER, caret=caret))
    assert len(store) == 1
    assert block.content == "```py\n    x = 1\n    "
    assert store.take_cursor_request() == CursorRequest(block.id, caret + 5)


def test_enter_in_closed_code_block_splits():
    store, handler = make("```\nx\n```")
    handler.handle_key(0, KeyInput(ENTER, caret=len("```\nx\n```")))
    assert contents(store) == ["```\nx\n```", ""]


def test_enter_on_pipe_row_converts_to_table(changes):
    store, handler = make("| x | y |", changes)
    assert handler.handle_key(0, KeyInput(ENTER, caret=9))
    assert len(store) == 2
    table, follower = store.blocks
    assert table.type is BlockType.TABLE
    assert table.content.split("\n") == ["| x | y |", "| --- | --- |", "|  |  |"]
    assert follower.content == "" and follower.type is BlockType.TEXT
    assert store.take_cursor_request() == CursorRequest(follower.id, 0)
    model = parse_table(table.content)
    assert model.headers == ["x", "y"]
    assert changes[-1] == table.content + "\n"


def test_empty_header_between_pipes_is_kept():
    store, handler = make("| | b |")
    handler.handle_key(0, KeyInput(ENTER, caret=7))
    assert parse_table(store.blocks[0].content).headers == ["", "b"]


def test_all_empty_headers_fall_back_to_split():
    store, handler = make("| |")
    handler.handle_key(0, KeyInput(ENTER, caret=3))
    assert [b.type for b in store.blocks] == [BlockType.TEXT, BlockType.TEXT]
    assert contents(store) == ["| |", ""]


def test_table_trigger_detection():
    assert is_table_trigger("| a | b |")
    assert is_table_trigger("  |a|")
    assert not is_table_trigger("| a")
    assert not is_table_trigger("a | b |")
    assert table_headers_from_row("| a | b |") == ["a", "b"]


# -- Backspace


def test_backspace_in_empty_block_merges_into_previous():
    store, handler = make("first\n")
    assert handler.handle_key(1, KeyInput(BACKSPACE))
    assert contents(store) == ["first"]
    assert store.take_cursor_request() == CursorRequest(store.blocks[0].id, 5)


def test_backspace_in_first_or_nonempty_block_is_native():
    store, handler = make("\nabc")
    assert not handler.handle_key(0, KeyInput(BACKSPACE))
    assert not handler.handle_key(1, KeyInput(BACKSPACE, caret=0))
    assert len(store) == 2


# -- Tab


def test_tab_in_code_inserts_spaces():
    store, handler = make("```\nx")
    block = store.blocks[0]
    assert handler.handle_key(0, KeyInput(TAB, caret=4))
    assert block.content == "```\n" + TAB_SPACES + "x"
    assert store.take_cursor_request().offset == 4 + len(TAB_SPACES)


def test_tab_outside_code_is_native():
    store, handler = make("text")
    assert not handler.handle_key(0, KeyInput(TAB, caret=0))


# -- arrows


def test_arrow_up_from_first_line_moves_to_previous_block_end():
    store, handler = make("above\nbelow")
    assert handler.handle_key(1, KeyInput(ARROW_UP, caret=3))
    assert store.take_cursor_request() == CursorRequest(store.blocks[0].id, 5)


def test_arrow_up_inside_multiline_block_is_native():
    store, handler = make("above\n```\nx\ny")
    assert not handler.handle_key(1, KeyInput(ARROW_UP, caret=6))
    assert not handler.handle_key(0, KeyInput(ARROW_UP, caret=0))


def test_arrow_down_from_last_line_moves_to_next_block_start():
    store, handler = make("above\nbelow")
    assert handler.handle_key(0, KeyInput(ARROW_DOWN, caret=2))
    assert store.take_cursor_request() == CursorRequest(store.blocks[1].id, 0)
    assert not handler.handle_key(1, KeyInput(ARROW_DOWN, caret=0))


def test_arrow_respects_visual_line_hints():
    store, handler = make("a\nwrapped long line")
    assert not handler.handle_key(1, KeyInput(ARROW_UP, caret=10, on_first_line=False))
    assert handler.handle_key(0, KeyInput(ARROW_DOWN, caret=0, on_last_line=True))


# -- composition and non-text blocks


def test_composition_suppresses_all_handling():
    store, handler = make("| x |\n")
    assert not handler.handle_key(0, KeyInput(ENTER, composing=True, caret=5))
    assert not handler.handle_key(1, KeyInput(BACKSPACE, composing=True))
    assert len(store) == 2


def test_keys_on_table_blocks_are_ignored():
    store, handler = make("| a |\n| --- |")
    assert not handler.handle_key(0, KeyInput(ENTER))
    assert not handler.handle_key(7, KeyInput(ENTER))


# -- paste


def test_multiline_paste_distributes_lines():
    store, handler = make("ab")
    assert handler.handle_paste(0, "line1\nline2\nline3", caret=1)
    assert contents(store) == ["aline1", "line2", "line3b"]
    assert store.take_cursor_request() == CursorRequest(store.blocks[2].id, 5)


def test_paste_normalizes_line_endings_and_replaces_selection():
    store, handler = make("XYZ")
    handler.handle_paste(0, "1\r\n2\r3", caret=1, selection_end=2)
    assert contents(store) == ["X1", "2", "3Z"]


def test_single_line_paste_is_native():
    store, handler = make("ab")
    assert not handler.handle_paste(0, "plain", caret=1)
    assert not handler.handle_paste(0, "", caret=1)


def test_multiline_paste_into_code_block_is_literal():
    store, handler = make("```\n")
    block = store.blocks[0]
    assert handler.handle_paste(0, "a\nb", caret=4)
    assert len(store) == 1
    assert block.content == "```\na\nb"
    assert store.take_cursor_request().offset == 7


def test_pasted_fence_lines_get_code_types():
    store, handler = make("")
    handler.handle_paste(0, "```\ncode", caret=0)
    assert [b.type for b in store.blocks] == [BlockType.CODE_OPEN, BlockType.TEXT]


# -- inline insertion and images


def test_insert_text_at_clamps_caret():
    store, handler = make("ab")
    assert handler.insert_text_at(0, "!", 99)
    assert store.blocks[0].content == "ab!"
    assert store.take_cursor_request().offset == 3


def test_insert_image_appends_focused_block():
    store, handler = make("a\nb")
    block = handler.insert_image(0, "data:image/png;base64,AAA")
    assert contents(store) == ["a", "![Image](data:image/png;base64,AAA)", "b"]
    assert store.take_cursor_request() == CursorRequest(block.id, 0)


def test_insert_image_without_position_goes_last():
    store, handler = make("a\nb")
    handler.insert_image(None, "data:x")
    assert contents(store)[-1] == "![Image](data:x)"
