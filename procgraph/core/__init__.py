"""Catalog, nodes, parameters and the process builder."""
