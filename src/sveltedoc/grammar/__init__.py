"""Documentation-comment and type-annotation grammars."""
