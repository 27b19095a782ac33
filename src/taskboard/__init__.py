"""Task board state engine with git-backed persistence."""
