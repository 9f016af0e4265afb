from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

# room for the dialog border and the viewer's scrollbar
DIALOG_MARGIN = 6


class HelpDialog(ModalScreen[None]):
    """
    Modal help screen for the command reference and the timestamp layout table.
    The dialog is as wide as the widest line of the Markdown text, up to 90% of the screen.
    """

    DEFAULT_CSS = """
    HelpDialog {
        align: center middle;
    }

    HelpDialog > Vertical {
        background: $panel;
        border: thick $primary;
        height: 90%;
        max-width: 90%;
    }

    HelpDialog MarkdownViewer {
        height: 1fr;
    }

    HelpDialog Button {
        margin: 1 0 0 0;
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("escape,f1", "close", "Close", show=False),
    ]

    def __init__(self, content: str) -> None:
        super().__init__()
        self.content = content
        self.content_width = max((len(line) for line in content.splitlines()), default=0)

    def compose(self) -> ComposeResult:
        with Vertical() as dialog:
            dialog.styles.width = self.content_width + DIALOG_MARGIN
            yield MarkdownViewer(self.content, show_table_of_contents=False)
            yield Button("Close", variant="primary")

    def on_mount(self) -> None:
        self.query_one(MarkdownViewer).focus()

    def action_close(self) -> None:
        self.dismiss()

    @on(Button.Pressed)
    def close_clicked(self) -> None:
        self.dismiss()
