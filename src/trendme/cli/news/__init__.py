"""News, trend and sub-topic commands."""
