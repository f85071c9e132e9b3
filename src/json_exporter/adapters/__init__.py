"""Adapters connecting the core to logging and storage backends."""
