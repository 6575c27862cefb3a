"""Qt-facing layer of the editor."""
