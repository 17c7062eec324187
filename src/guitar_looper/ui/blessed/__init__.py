"""Blessed-based interactive player UI."""
