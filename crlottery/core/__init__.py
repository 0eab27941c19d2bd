"""Core engine components: codec, block time, storage, lottery state."""
