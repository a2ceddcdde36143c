"""Bot commands. Each one doubles as a follow-up action button."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    label: str
    text: str  # what the user types, and what a button press sends back

    def matches(self, token: str) -> bool:
        # Slash form only; bare words are ordinary chat
        return token.lower() == self.text


COMMAND_BOT_TALK = Command(name="talk", label="Talk", text="/talk")
COMMAND_BOT_CONTINUE = Command(name="continue", label="Continue", text="/continue")
COMMAND_BOT_FORGET = Command(name="forget", label="Forget", text="/forget")
COMMAND_BOT_ACTIVATE = Command(name="activate", label="Activate", text="/activate")
COMMAND_BOT_DEACTIVATE = Command(name="deactivate", label="Deactivate", text="/deactivate")

ALL_COMMANDS = (
    COMMAND_BOT_TALK,
    COMMAND_BOT_CONTINUE,
    COMMAND_BOT_FORGET,
    COMMAND_BOT_ACTIVATE,
    COMMAND_BOT_DEACTIVATE,
)


def find_command(text: str) -> Command | None:
    """Return the command invoked by ``text``'s first token, if any."""
    token = leading_token(text)
    for command in ALL_COMMANDS:
        if command.matches(token):
            return command
    return None


def leading_token(text: str) -> str:
    """First whitespace-separated token, lowercased, without a ``@botname`` suffix."""
    parts = text.strip().split(maxsplit=1)
    if not parts:
        return ""
    token = parts[0].lower()
    if token.startswith("/") and "@" in token:
        token = token.split("@", 1)[0]
    return token
