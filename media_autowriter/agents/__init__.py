"""Generation agents."""
