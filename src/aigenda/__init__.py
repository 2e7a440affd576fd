"""aigenda — daily notes with a tool-using assistant."""
