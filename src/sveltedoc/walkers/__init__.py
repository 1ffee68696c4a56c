"""Script and markup walkers built on tree-sitter."""
