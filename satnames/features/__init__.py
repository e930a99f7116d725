"""Feature modules for satnames."""
