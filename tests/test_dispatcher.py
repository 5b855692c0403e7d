from unittest.mock import Mock, call

import pytest

from winctl.dispatcher import Dispatcher
from winctl.handles import HandleTable
from winctl.models import Command, Geometry, SsdMode, ViewAxis
from winctl.protocol import DECORATIONS_DISABLED
from winctl.registry import View, WindowRegistry


@pytest.fixture
def views():
    return [View(title="one"), View(title="two", minimized=True)]


@pytest.fixture
def env(views, test_logger):
    registry = Mock(spec=WindowRegistry)
    registry.views.return_value = views
    handles = HandleTable()
    for view in views:
        handles.handle_for(view)
    broadcaster = Mock()
    session = Mock()
    session.name = "client#1"
    dispatcher = Dispatcher(registry, handles, broadcaster, test_logger, colored=False)
    return dispatcher, registry, broadcaster, session


def run(dispatcher, session, line):
    dispatcher.handle_line(session, line.encode())


def test_every_command_has_a_handler():
    for command in Command:
        assert callable(getattr(Dispatcher, f"run_{command}"))


def test_close(env, views):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"close","id":"1"}')
    registry.close.assert_called_once_with(views[0])


def test_unknown_target(env):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"close","id":"ffff"}')
    run(dispatcher, session, '{"cmd":"close"}')
    registry.close.assert_not_called()
    session.send.assert_not_called()


def test_minimize_toggles(env, views):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"minimize","id":"1"}')
    run(dispatcher, session, '{"cmd":"minimize","id":"2"}')
    assert registry.minimize.call_args_list == [call(views[0], True), call(views[1], False)]


def test_maximize_both_axis(env, views):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"maximize","id":"2"}')
    registry.toggle_maximize.assert_called_once_with(views[1], ViewAxis.BOTH)


@pytest.mark.parametrize(
    "fields",
    [
        '"width":0,"height":10',
        '"width":10,"height":0',
        '"width":-5,"height":10',
        '"x":3,"y":4',
    ],
)
def test_move_rejects_degenerate_size(env, fields):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"move","id":"1",%s}' % fields)
    registry.move_resize.assert_not_called()


def test_move(env, views):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"move","id":"1","x":-10,"y":20,"width":10,"height":10}')
    registry.move_resize.assert_called_once_with(views[0], Geometry(-10, 20, 10, 10))


def test_focus_and_layers(env, views):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"focus","id":"2"}')
    run(dispatcher, session, '{"cmd":"always_on_top","id":"1"}')
    run(dispatcher, session, '{"cmd":"always_on_bottom","id":"2"}')
    registry.focus.assert_called_once_with(views[1])
    registry.toggle_always_on_top.assert_called_once_with(views[0])
    registry.toggle_always_on_bottom.assert_called_once_with(views[1])


def test_list_replies_to_caller(env):
    dispatcher, _, broadcaster, session = env
    run(dispatcher, session, '{"cmd":"list"}')
    broadcaster.send_window_list.assert_called_once_with(session)


def test_enable_decorations(env, views):
    dispatcher, registry, _, session = env
    run(dispatcher, session, '{"cmd":"enable_decorations"}')
    assert registry.set_decoration_mode.call_args_list == [call(views[0], SsdMode.NONE), call(views[1], SsdMode.NONE)]
    session.send.assert_called_once_with(DECORATIONS_DISABLED)


@pytest.mark.parametrize("line", ['{"cmd":"explode","id":"1"}', "garbage", '{"cmd":"focus","id":"zz"}'])
def test_invalid_messages_are_dropped(env, line, test_logger):
    dispatcher, registry, broadcaster, session = env
    run(dispatcher, session, line)
    assert registry.method_calls == []
    assert broadcaster.method_calls == []
    session.send.assert_not_called()
    test_logger.debug.assert_called()


def test_registry_errors_are_contained(env, views, test_logger):
    dispatcher, registry, _, session = env
    registry.close.side_effect = RuntimeError("boom")
    run(dispatcher, session, '{"cmd":"close","id":"1"}')
    test_logger.exception.assert_called_once()
    session.destroy.assert_not_called()


def test_colored_log(env, test_logger):
    dispatcher, _, _, session = env
    dispatcher.colored = True
    run(dispatcher, session, '{"cmd":"list"}')
    text = test_logger.debug.call_args[0][2]
    assert "list" in text
    assert text.startswith("\x1b[")


def test_session_handler_errors_are_contained(env, test_logger):
    dispatcher, _, broadcaster, session = env
    broadcaster.send_window_list.side_effect = RuntimeError("boom")
    run(dispatcher, session, '{"cmd":"list"}')
    test_logger.exception.assert_called_once()
