"""CLI subcommands for labctl."""
