"""Desktop application layer (Tk window and entry point)."""
