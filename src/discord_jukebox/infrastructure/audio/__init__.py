"""Audio infrastructure - yt-dlp based media resolution."""
