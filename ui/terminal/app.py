"""
Textual Application - Chat TUI
==============================

This module implements a Textual chat screen for the ELIZA responder:
a scrolling transcript of turns, an input line and a send button.
The app only displays text; every reply comes from the Responder it
is given.
"""

from typing import List, Optional, Tuple

from textual.app import App, ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Header, Footer, Static, Button, Input
from textual.binding import Binding
from textual import work

from core.config import Config, load_config
from core.exceptions import ElizaError
from core.logging import get_logger
from services.responder import Responder, create_responder

logger = get_logger("tui.app")


class ElizaChatApp(App):
    """
    Terminal chat with ELIZA.

    Attributes:
        transcript (list): (speaker, text) pairs in display order
    """

    TITLE = "ELIZA"

    CSS = """
    Screen {
        background: $surface;
    }

    #conversation-area {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    .message {
        margin: 0 0 1 0;
        padding: 0 1;
    }

    .user-message {
        color: $text;
        background: $primary 20%;
        text-align: right;
    }

    .eliza-message {
        color: $text;
        background: $accent 15%;
    }

    #input-row {
        height: auto;
        margin: 1 0 0 0;
    }

    #user-input {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+r", "reload_rules", "Reload rules"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: Optional[Config] = None,
        responder: Optional[Responder] = None
    ):
        super().__init__()
        self.config = config or load_config()
        self.responder = responder or create_responder(self.config)
        self.transcript: List[Tuple[str, str]] = []

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(id="conversation-area")
        with Horizontal(id="input-row"):
            yield Input(placeholder="Say something...", id="user-input")
            yield Button("Send", id="send-button", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#user-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.handle_user_message()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-button":
            self.handle_user_message()

    def handle_user_message(self) -> None:
        """Send the input line to the responder and show both turns."""
        input_widget = self.query_one("#user-input", Input)
        message = input_widget.value.strip()
        if not message:
            return

        input_widget.value = ""
        self.display_message(self.config.ui.user_label, message, "user-message")
        self.display_message(self.config.ui.bot_label, self.responder.respond(message), "eliza-message")

    def display_message(self, speaker: str, text: str, css_class: str) -> None:
        self.transcript.append((speaker, text))
        area = self.query_one("#conversation-area", VerticalScroll)
        area.mount(Static(f"{speaker}: {text}", classes=f"message {css_class}", markup=False))
        area.scroll_end(animate=False)

    def action_reload_rules(self) -> None:
        self.reload_rules()

    @work(thread=True, exclusive=True)
    def reload_rules(self) -> None:
        try:
            table = self.responder.reload()
        except ElizaError as e:
            self.call_from_thread(self.notify, f"Reload failed: {e}", severity="error")
            return
        self.call_from_thread(self.notify, f"Loaded {len(table)} rules")


def run_tui(config: Optional[Config] = None, responder: Optional[Responder] = None) -> None:
    app = ElizaChatApp(config=config, responder=responder)
    app.run()


if __name__ == "__main__":
    run_tui()
