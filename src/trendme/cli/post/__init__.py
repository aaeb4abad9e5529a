"""Grid post commands."""
