"""Flask HTTP surface."""
