"""Analysis agents for covdelta."""
