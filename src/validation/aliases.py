from typing import Dict, Optional


class BidderAliases:
    """
    Maps a bidder's reporting name (alias) to its canonical bidder name.
    Unknown names resolve to themselves.
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None):
        self._aliases = dict(aliases or {})

    def resolve(self, bidder: str) -> str:
        return self._aliases.get(bidder, bidder)
