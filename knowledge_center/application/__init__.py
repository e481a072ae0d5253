"""Application layer: use-case services over the core and boundary layers."""
