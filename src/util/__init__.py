"""Download cache, resource overlay and filesystem utilities."""
