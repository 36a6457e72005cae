"""Repository index lookup for configured items."""
