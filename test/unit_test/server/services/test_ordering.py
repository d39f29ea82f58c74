"""Unit tests for dense sibling ordering."""

import pytest

from lingua_learn.core.database.entities import Unit
from lingua_learn.core.errors import ContentRuleError
from lingua_learn.server.services.ordering import SiblingOrdering

units = SiblingOrdering(Unit, "learning_path_id", "unit")


async def _add_units(session, path_id, *titles):
    created = []
    for title in titles:
        unit = Unit(learning_path_id=path_id, title=title)
        await units.place(session, unit)
        session.add(unit)
        await session.flush()
        created.append(unit)
    return created


async def _titles(session, path_id):
    return [unit.title for unit in await units.siblings(session, path_id)]


async def test_place_appends_after_existing(session, content_tree):
    (extra,) = await _add_units(session, content_tree.path.id, "Numbers")
    assert extra.order == 2


async def test_place_with_order_shifts_siblings(session, content_tree):
    path_id = content_tree.path.id
    await _add_units(session, path_id, "Numbers")
    first = Unit(learning_path_id=path_id, title="Alphabet")
    await units.place(session, first, order=1)
    session.add(first)
    await session.flush()

    assert await _titles(session, path_id) == ["Alphabet", "Greetings", "Numbers"]
    assert [unit.order for unit in await units.siblings(session, path_id)] == [1, 2, 3]


async def test_move_down_and_up(session, content_tree):
    path_id = content_tree.path.id
    await _add_units(session, path_id, "Numbers", "Colours")

    await units.move(session, content_tree.unit, 3)
    await session.flush()
    assert await _titles(session, path_id) == ["Numbers", "Colours", "Greetings"]

    await units.move(session, content_tree.unit, 1)
    await session.flush()
    assert await _titles(session, path_id) == ["Greetings", "Numbers", "Colours"]


async def test_close_gap_after_delete(session, content_tree):
    path_id = content_tree.path.id
    numbers, colours = await _add_units(session, path_id, "Numbers", "Colours")
    await session.delete(numbers)
    await session.flush()

    await units.close_gap(session, path_id, 2)
    await session.flush()
    assert [(unit.title, unit.order) for unit in await units.siblings(session, path_id)] == [
        ("Greetings", 1),
        ("Colours", 2),
    ]


async def test_reorder_assigns_dense_positions(session, content_tree):
    path_id = content_tree.path.id
    numbers, colours = await _add_units(session, path_id, "Numbers", "Colours")

    ordered = await units.reorder(session, path_id, [colours.id, content_tree.unit.id, numbers.id])
    assert [unit.title for unit in ordered] == ["Colours", "Greetings", "Numbers"]
    assert [unit.order for unit in ordered] == [1, 2, 3]


@pytest.mark.parametrize("bad_ids", [[1, 1], [999]])
async def test_reorder_rejects_foreign_or_repeated_ids(session, content_tree, bad_ids):
    with pytest.raises(ContentRuleError, match="Invalid unit IDs provided."):
        await units.reorder(session, content_tree.path.id, bad_ids)
