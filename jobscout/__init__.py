"""JobScout - job discovery and relevance scoring pipeline."""
