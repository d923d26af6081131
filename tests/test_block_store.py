from recordnow.editor import Block, BlockStore, BlockType, CursorRequest


def make_store(text="a\nb\nc"):
    changes = []
    store = BlockStore.from_markdown(text, on_change=changes.append)
    return store, changes


def test_empty_store_has_one_block():
    store = BlockStore()
    assert len(store) == 1
    assert store.joined_content == ""
    assert len(BlockStore([])) == 1


def test_update_block_content_notifies_with_joined_content():
    store, changes = make_store()
    block = store.blocks[1]
    assert store.update_block_content(block.id, "B")
    assert changes == ["a\nB\nc"]
    assert not store.update_block_content("missing", "x")
    assert len(changes) == 1


def test_update_rederives_code_state():
    store, _ = make_store("x")
    block = store.blocks[0]
    store.update_block_content(block.id, "```py")
    assert block.type is BlockType.CODE_OPEN
    store.update_block_content(block.id, "```py\nx\n```")
    assert block.type is BlockType.CODE_CLOSED
    store.update_block_content(block.id, "plain")
    assert block.type is BlockType.TEXT


def test_table_blocks_keep_their_type_on_update():
    store, _ = make_store("| a |\n| --- |")
    block = store.blocks[0]
    store.update_block_content(block.id, "| b |\n| --- |")
    assert block.type is BlockType.TABLE


def test_split_keeps_original_id():
    store, changes = make_store("hello world")
    original = store.blocks[0].id
    new_block = store.split_at(0, "hello", " world")
    assert store.blocks[0].id == original
    assert [b.content for b in store.blocks] == ["hello", " world"]
    assert new_block is store.blocks[1]
    assert changes == ["hello\n world"]


def test_split_into_many():
    store, changes = make_store("x")
    created = store.split_into(0, ["1", "```", "3"])
    assert [b.content for b in created] == ["1", "```", "3"]
    assert created[1].type is BlockType.CODE_OPEN
    assert len(changes) == 1


def test_merge_with_previous_focuses_end_of_previous():
    store, changes = make_store("first\n")
    empty = store.blocks[1]
    previous = store.merge_with_previous(empty.id)
    assert previous is store.blocks[0]
    assert len(store) == 1
    assert store.focused_id == previous.id
    assert store.take_cursor_request() == CursorRequest(previous.id, len("first"))
    assert changes == ["first"]


def test_merge_first_block_is_noop():
    store, changes = make_store()
    assert store.merge_with_previous(store.blocks[0].id) is None
    assert store.merge_with_previous("missing") is None
    assert changes == []


def test_convert_to_table_inserts_empty_follower():
    store, changes = make_store("| x |")
    follower = store.convert_to_table(0, "| x |\n| --- |\n|  |")
    assert store.blocks[0].type is BlockType.TABLE
    assert store.blocks[1] is follower
    assert follower.content == "" and follower.type is BlockType.TEXT
    assert store.take_cursor_request() == CursorRequest(follower.id, 0)
    assert changes[-1] == "| x |\n| --- |\n|  |\n"


def test_insert_after_clamps_position():
    store, _ = make_store("a\nb")
    front = store.insert_after(-5, Block("front"))
    back = store.insert_after(99, Block("back"))
    assert store.blocks[0] is front
    assert store.blocks[-1] is back


def test_remove_never_leaves_zero_blocks():
    store, changes = make_store("only")
    store.request_focus(store.blocks[0].id)
    assert store.remove(store.blocks[0].id)
    assert len(store) == 1
    assert store.blocks[0].content == ""
    assert store.focused_id is None
    assert changes == [""]
    assert not store.remove("missing")


def test_cursor_request_is_clamped_and_cleared():
    store, _ = make_store("abc")
    block = store.blocks[0]
    assert store.request_focus(block.id, 50)
    assert store.pending_cursor == CursorRequest(block.id, 50)
    assert store.take_cursor_request() == CursorRequest(block.id, 3)
    assert store.take_cursor_request() is None
    store.request_focus(block.id, -4)
    assert store.take_cursor_request().offset == 0


def test_stale_focus_requests_are_dropped():
    store, _ = make_store("a\nb")
    assert not store.request_focus("nope", 0)
    assert store.pending_cursor is None
    doomed = store.blocks[1]
    store.request_focus(doomed.id, 1)
    store.remove(doomed.id)
    assert store.take_cursor_request() is None


def test_focus_end():
    store, _ = make_store("a\nlast")
    block = store.focus_end()
    assert block.content == "last"
    assert store.take_cursor_request() == CursorRequest(block.id, 4)


def test_block_at_line():
    store, _ = make_store("# T\n```\nx\n```\nafter")
    assert store.block_at_line(0).content == "# T"
    assert store.block_at_line(2).type is BlockType.CODE_CLOSED
    assert store.block_at_line(4).content == "after"
    assert store.block_at_line(5) is None
    assert store.block_at_line(-1) is None


def test_set_block_type_does_not_notify():
    store, changes = make_store("x")
    assert store.set_block_type(store.blocks[0].id, BlockType.TABLE)
    assert not store.set_block_type(store.blocks[0].id, BlockType.TABLE)
    assert changes == []
