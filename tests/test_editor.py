"""Test the editor controller: key dispatch, prompts, load/save reporting."""

import os
import tempfile
from unittest.mock import patch, MagicMock, PropertyMock

import pytest
from hecto.editor import Editor
from hecto.keyboard import KeyEvent, KeyType
from hecto.model import Buffer, Line, Position


def key(value):
    return KeyEvent(key_type=KeyType.REGULAR, value=value, raw=value)


def special(value):
    return KeyEvent(key_type=KeyType.SPECIAL, value=value, raw=value)


def ctrl(value):
    return KeyEvent(key_type=KeyType.CTRL, value=value, raw=value, is_ctrl=True)


def create_editor(lines=None, filename=None):
    editor = Editor()
    editor.buffer = Buffer([Line(text) for text in (lines or [])], filename=filename)
    editor.view.set_buffer(editor.buffer)
    editor.view.resize(80, 20)
    return editor


def type_text(editor, text):
    for ch in text:
        editor._handle_key_event(special('enter') if ch == '\n' else key(ch))


def test_typing_updates_buffer_and_cursor():
    editor = create_editor()
    type_text(editor, "ab\ncd")
    assert editor.buffer.contents() == ["ab", "cd"]
    assert editor.view.cursor == Position(2, 1)
    assert editor.modified == True


def test_arrow_keys_move_cursor():
    editor = create_editor(["hello", "world"])
    editor._handle_key_event(special('down'))
    editor._handle_key_event(special('end'))
    assert editor.view.cursor == Position(5, 1)
    editor._handle_key_event(special('page_up'))
    editor._handle_key_event(special('home'))
    assert editor.view.cursor == Position(0, 0)
    assert editor.modified == False


def test_backspace_and_delete_keys():
    editor = create_editor(["hello", "world"])
    editor.view.cursor = Position(5, 0)
    editor._handle_key_event(special('delete'))
    assert editor.buffer.contents() == ["helloworld"]
    editor._handle_key_event(special('backspace'))
    assert editor.buffer.contents() == ["hellworld"]
    assert editor.view.cursor == Position(4, 0)


def test_unbound_keys_are_ignored():
    editor = create_editor(["hello"])
    for event in (ctrl('x'), special('escape'), special('insert'), special('ctrl-left'), key('\x01')):
        editor._handle_key_event(event)
    assert editor.buffer.contents() == ["hello"]
    assert editor.view.cursor == Position(0, 0)
    assert editor.modified == False


def test_quit_unmodified_stops_immediately():
    editor = create_editor(["hello"])
    editor.running = True
    editor._handle_key_event(ctrl('q'))
    assert editor.running == False
    assert editor.prompt_mode is None


def test_quit_modified_asks_and_n_discards():
    editor = create_editor()
    editor.running = True
    type_text(editor, "x")
    editor._handle_key_event(ctrl('q'))
    assert editor.prompt_mode == 'quit_confirm'
    assert editor.running == True
    assert editor.prompt_text() == "Save changes before exit? (y/n) "

    editor._handle_key_event(key('n'))
    assert editor.running == False


def test_quit_confirm_other_key_cancels():
    editor = create_editor()
    editor.running = True
    type_text(editor, "x")
    editor._handle_key_event(ctrl('q'))
    editor._handle_key_event(key('z'))
    assert editor.prompt_mode is None
    assert editor.running == True
    assert editor.buffer.contents() == ["x"]


def test_quit_confirm_yes_saves_named_buffer():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "doc.txt")
        editor = create_editor(filename=path)
        editor.running = True
        type_text(editor, "saved")
        editor._handle_key_event(ctrl('q'))
        editor._handle_key_event(key('y'))

        assert editor.running == False
        with open(path, encoding='utf-8') as f:
            assert f.read() == "saved\n"


def test_quit_confirm_yes_prompts_for_name_when_unnamed():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "new.txt")
        editor = create_editor()
        editor.running = True
        type_text(editor, "text")
        editor._handle_key_event(ctrl('q'))
        editor._handle_key_event(key('Y'))
        assert editor.prompt_mode == 'save_filename_quit'

        type_text(editor, path)
        editor._handle_key_event(special('enter'))

        assert editor.running == False
        assert editor.filename == path
        with open(path, encoding='utf-8') as f:
            assert f.read() == "text\n"


def test_save_named_buffer():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "doc.txt")
        editor = create_editor(["a", "b"], filename=path)
        type_text(editor, "z")
        editor._handle_key_event(ctrl('s'))

        assert editor.modified == False
        assert editor.status_message == f"Saved to {path}"
        with open(path, encoding='utf-8') as f:
            assert f.read() == "za\nb\n"


def test_save_prompt_editing_and_cancel():
    editor = create_editor(["a"])
    editor._handle_key_event(ctrl('s'))
    assert editor.prompt_mode == 'save_filename'

    type_text(editor, "abc")
    editor._handle_key_event(special('backspace'))
    assert editor.prompt_input == "ab"
    assert editor.prompt_text() == "Save as: ab"

    editor._handle_key_event(special('escape'))
    assert editor.prompt_mode is None
    assert editor.status_message == "Save cancelled"
    # The prompt keys never reached the buffer
    assert editor.buffer.contents() == ["a"]


def test_empty_filename_keeps_prompt_open():
    editor = create_editor(["a"])
    editor._handle_key_event(ctrl('s'))
    editor._handle_key_event(special('enter'))
    assert editor.prompt_mode == 'save_filename'


def test_failed_save_reports_and_keeps_running():
    """A save error shows on the status line and the buffer stays modified."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "no_such_dir", "doc.txt")
        editor = create_editor(filename=path)
        editor.running = True
        type_text(editor, "x")
        editor._handle_key_event(ctrl('s'))

        assert editor.status_message.startswith("Error:")
        assert editor.modified == True
        assert editor.running == True

        # Quitting with a failing save keeps the editor open
        editor._handle_key_event(ctrl('q'))
        editor._handle_key_event(key('y'))
        assert editor.running == True
        assert editor.modified == True


def test_status_message_cleared_by_next_key():
    editor = create_editor(["a"])
    editor.status_message = "Saved to x"
    editor._handle_key_event(special('right'))
    assert editor.status_message is None


def test_load_existing_file():
    with tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False, encoding='utf-8') as f:
        f.write("one\ntwo\n")
        temp_filename = f.name

    try:
        editor = Editor()
        editor.load_file(temp_filename)
        assert editor.buffer.contents() == ["one", "two"]
        assert editor.view.buffer is editor.buffer
        assert editor.filename == temp_filename
        assert editor.modified == False
        assert editor.status_message is None
    finally:
        os.remove(temp_filename)


def test_load_missing_file_starts_new_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "new.txt")
        editor = Editor()
        editor.load_file(path)
        assert editor.buffer.line_count() == 0
        assert editor.filename == path
        assert editor.status_message is None


def test_load_invalid_file_reports_and_leaves_unnamed_buffer():
    with tempfile.NamedTemporaryFile(mode='wb', suffix='.txt', delete=False) as f:
        f.write(b"\xff\xfe\xfd")
        temp_filename = f.name

    try:
        editor = Editor()
        editor.load_file(temp_filename)
        assert "not valid UTF-8" in editor.status_message
        assert editor.buffer.line_count() == 0
        assert editor.filename is None
    finally:
        os.remove(temp_filename)


def test_invalid_cursor_position_is_fatal():
    """An out-of-range cursor is a bug and is not swallowed by the editor."""
    editor = create_editor(["abc"])
    editor.view.cursor = Position(10, 0)
    with pytest.raises(IndexError):
        editor._handle_key_event(key('x'))


def test_run_loop_draws_after_each_key_and_cleans_up():
    editor = create_editor(["hello"])
    events = [key('a'), ctrl('q'), key('n')]

    with patch.object(editor.terminal, 'setup') as mock_setup, \
         patch.object(editor.terminal, 'cleanup') as mock_cleanup, \
         patch.object(editor.terminal.term, 'cbreak', MagicMock()), \
         patch.object(editor.keyboard, 'get_key_event', side_effect=events), \
         patch.object(editor, '_draw') as mock_draw, \
         patch('hecto.editor.select.select') as mock_select:
        mock_select.side_effect = [([0], [], []), ([0], [], []), ([0], [], [])]
        editor.run()

    mock_setup.assert_called_once()
    mock_cleanup.assert_called_once()
    # Initial draw, one after 'a' and one for the quit prompt
    assert mock_draw.call_count == 3
    assert editor.running == False
    assert editor.buffer.contents() == ["ahello"]


def test_run_loop_redraws_on_resize():
    editor = create_editor(["hello"])

    with patch.object(editor.terminal, 'setup'), \
         patch.object(editor.terminal, 'cleanup'), \
         patch.object(editor.terminal, 'invalidate_frame') as mock_invalidate, \
         patch.object(editor.terminal.term, 'cbreak', MagicMock()), \
         patch.object(editor.keyboard, 'get_key_event', return_value=ctrl('q')), \
         patch.object(editor, '_draw') as mock_draw, \
         patch('hecto.editor.select.select') as mock_select:
        mock_select.side_effect = [
            ([editor._resize_pipe_r], [], []),  # Resize pipe ready
            ([0], [], []),  # stdin ready
        ]
        os.write(editor._resize_pipe_w, b'R')
        editor.run()

    mock_invalidate.assert_called_once()
    assert mock_draw.call_count == 2


def test_draw_uses_terminal_dimensions():
    editor = create_editor([f"line {i}" for i in range(50)])
    editor.view.cursor = Position(0, 40)

    with patch.object(type(editor.terminal), 'width', PropertyMock(return_value=30)), \
         patch.object(type(editor.terminal), 'height', PropertyMock(return_value=10)), \
         patch.object(editor.terminal, 'update_frame') as mock_update:
        editor._draw()

    frame = mock_update.call_args[0][0]
    assert editor.view.num_rows == 10
    assert editor.view.num_columns == 30
    assert frame.cursor_y == 9
    assert frame.lines[-1] == "line 40"
    assert mock_update.call_args[1]['prompt'] is None


def test_draw_shows_banner_for_empty_buffer():
    editor = create_editor()
    with patch.object(editor.terminal, 'update_frame') as mock_update:
        editor._draw()
    frame = mock_update.call_args[0][0]
    assert frame.banner.startswith("Hecto editor -- version")
