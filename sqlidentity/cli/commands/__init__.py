"""Sub-command groups of the `sqlid` CLI."""
