"""Analysis modules for tracepath."""
