from winctl.handles import HandleTable
from winctl.registry import View


def test_handles_are_stable_and_increasing():
    table = HandleTable()
    first, second = View(title="a"), View(title="b")
    h1 = table.handle_for(first)
    h2 = table.handle_for(second)
    assert h2 > h1
    assert table.handle_for(first) == h1
    assert len(table) == 2
    assert sorted(table) == [h1, h2]


def test_resolve():
    table = HandleTable()
    view = View()
    handle = table.handle_for(view)
    assert table.resolve(handle) is view
    assert table.resolve(handle + 1) is None
    assert table.resolve(None) is None


def test_released_handles_are_not_reused():
    table = HandleTable()
    view = View()
    handle = table.handle_for(view)
    assert table.release(view) == handle
    assert table.resolve(handle) is None
    assert table.release(view) is None

    # the same object gets a fresh handle if it shows up again
    assert table.handle_for(view) > handle
    assert table.handle_for(View()) > handle


def test_equal_views_get_distinct_handles():
    table = HandleTable()
    assert table.handle_for(View(title="x")) != table.handle_for(View(title="x"))
