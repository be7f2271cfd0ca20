from rolechain.ui.terminal import TerminalUI

__all__ = ["TerminalUI"]
