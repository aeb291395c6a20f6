"""Airdrop Radar - scrape social posts and score them for airdrop opportunities."""

__version__ = "1.0.0"
