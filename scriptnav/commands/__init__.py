"""CLI commands registered on the scriptnav group."""
