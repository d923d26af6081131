from recordnow.editor import BlockStore, BlockType, open_table
from recordnow.editor.table_model import Alignment

TABLE = "| A | B |\n| --- | --- |\n| 1 | 2 |"


def test_cell_edit_serializes_back_into_block():
    changes = []
    store = BlockStore.from_markdown(f"intro\n{TABLE}\noutro", on_change=changes.append)
    table_id = store.blocks[1].id
    binding = open_table(store, table_id)
    assert binding is not None
    assert binding.set_cell(0, 1, "two")
    assert store.get(table_id).content == "| A | B |\n| --- | --- |\n| 1 | two |"
    assert changes[-1] == f"intro\n{store.get(table_id).content}\noutro"
    assert store.get(table_id).type is BlockType.TABLE


def test_unchanged_edit_does_not_notify():
    changes = []
    store = BlockStore.from_markdown(TABLE, on_change=changes.append)
    binding = open_table(store, store.blocks[0].id)
    assert not binding.set_cell(0, 0, "1")
    assert not binding.remove_row(7)
    assert changes == []


def test_structural_edits_keep_minimum_shape():
    store = BlockStore.from_markdown("| A |\n| --- |\n| 1 |")
    binding = open_table(store, store.blocks[0].id)
    assert not binding.remove_column(0)
    assert binding.remove_row(0)
    assert store.blocks[0].content == "| A |\n| --- |\n|  |"
    assert binding.add_column(0)
    assert binding.set_alignment(1, Alignment.RIGHT)
    assert binding.set_header(1, "Z")
    assert store.blocks[0].content == "| A | Z |\n| --- | ---: |\n|  |  |"


def test_move_row_through_binding():
    store = BlockStore.from_markdown("| A |\n| --- |\n| 1 |\n| 2 |")
    binding = open_table(store, store.blocks[0].id)
    assert binding.add_row(1)
    assert binding.move_row(0, 2)
    assert store.blocks[0].content.split("\n")[2:] == ["| 2 |", "|  |", "| 1 |"]


def test_invalid_table_is_demoted_to_text():
    store = BlockStore.from_markdown("| just one line |")
    block = store.blocks[0]
    assert block.type is BlockType.TABLE
    assert open_table(store, block.id) is None
    assert block.type is BlockType.TEXT
    assert block.content == "| just one line |"


def test_open_unknown_block():
    store = BlockStore.from_markdown(TABLE)
    assert open_table(store, "missing") is None


def test_header_only_table_serializes_with_a_data_row():
    store = BlockStore.from_markdown("| a | b |\n| --- | --- |")
    binding = open_table(store, store.blocks[0].id)
    assert binding.model.row_count == 1
    assert binding.set_alignment(0, "center")
    assert store.blocks[0].content == "| a | b |\n| :---: | --- |\n|  |  |"
