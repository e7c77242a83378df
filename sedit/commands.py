"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Optional, TYPE_CHECKING
from .constants import EditorConstants
from .keyboard import KeyType

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import KeyEvent


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            key_event: The key event that triggered this command

        Returns:
            True if the command modified the document
        """
        pass


class MovementCommand(EditorCommand):
    """Base class for cursor movement commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Movement commands don't modify the document."""
        self._move(editor, key_event)
        return False

    @abstractmethod
    def _move(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the movement."""
        pass


class LeftCharCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.left_char()


class RightCharCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.right_char()


class UpLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.up_line()


class DownLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.down_line()


class BeginningOfLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.move_beginning_of_line()


class EndOfLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.move_end_of_line()


class PageDownCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.scroll_page_down()


class PageUpCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.scroll_page_up()


class EditCommand(EditorCommand):
    """Base class for editing commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Editing commands modify the document when they apply."""
        dirty_before = editor.model.dirty
        self._edit(editor, key_event)
        return editor.model.dirty != dirty_before

    @abstractmethod
    def _edit(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the edit."""
        pass


class BackspaceCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.backspace()


class DeleteCharCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.delete_char_at_cursor()


class InsertNewlineCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.insert_newline_at_cursor()


class InsertTextCommand(EditCommand):
    def _edit(self, editor, key_event):
        # Insert the byte itself; control bytes such as Tab arrive as CTRL events
        char = chr(key_event.code) if key_event.code is not None else key_event.value
        editor.model.insert_char_at_cursor(char)


class SystemCommand(EditorCommand):
    """Base class for system commands like save, quit, search."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """System commands don't modify document content directly."""
        self._execute_system(editor, key_event)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the system action."""
        pass


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        if editor.model.dirty and not editor.quit_pending:
            editor.quit_pending = True
            editor.set_status_message(EditorConstants.QUIT_WARNING)
        else:
            editor.running = False


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.handle_save()


class FindCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.find()


class IgnoreCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        pass


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._insert_text = InsertTextCommand()
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        # Movement commands
        self.register((KeyType.SPECIAL, 'left'), LeftCharCommand())
        self.register((KeyType.SPECIAL, 'right'), RightCharCommand())
        self.register((KeyType.SPECIAL, 'up'), UpLineCommand())
        self.register((KeyType.SPECIAL, 'down'), DownLineCommand())
        self.register((KeyType.SPECIAL, 'home'), BeginningOfLineCommand())
        self.register((KeyType.SPECIAL, 'end'), EndOfLineCommand())

        # Paging (PageDown/PageUp)
        self.register((KeyType.SPECIAL, 'page_down'), PageDownCommand())
        self.register((KeyType.SPECIAL, 'page_up'), PageUpCommand())

        # Editing commands
        self.register((KeyType.CTRL, '?'), BackspaceCommand())
        self.register((KeyType.CTRL, 'h'), BackspaceCommand())
        self.register((KeyType.SPECIAL, 'delete'), DeleteCharCommand())
        # Map Ctrl-M / Ctrl-J to enter, consistent with terminals
        self.register((KeyType.CTRL, 'm'), InsertNewlineCommand())
        self.register((KeyType.CTRL, 'j'), InsertNewlineCommand())

        # System commands
        self.register((KeyType.CTRL, 'q'), QuitCommand())
        self.register((KeyType.CTRL, 's'), SaveCommand())
        self.register((KeyType.CTRL, 'f'), FindCommand())

        # Keys with no action
        self.register((KeyType.SPECIAL, 'escape'), IgnoreCommand())
        self.register((KeyType.CTRL, 'l'), IgnoreCommand())

    def register(self, key: Tuple[KeyType, str], command: EditorCommand):
        """Register a command for a key combination."""
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[EditorCommand]:
        """Get the command for a key combination."""
        return self._commands.get((key_type, value))

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command for the given key event.

        Returns:
            True if the document was modified
        """
        command = self.get_command(key_event.key_type, key_event.value)

        # Quit confirmation only survives consecutive quit presses
        if not isinstance(command, QuitCommand):
            editor.quit_pending = False

        if command:
            return command.execute(editor, key_event)

        # Anything unbound that carries a byte is inserted as text
        if key_event.key_type in (KeyType.REGULAR, KeyType.CTRL):
            return self._insert_text.execute(editor, key_event)

        return False
