"""Domain layer - loops, chapters, playback and video history."""
