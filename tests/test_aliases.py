from src.validation.aliases import BidderAliases


def test_alias_resolves_to_canonical():
    aliases = BidderAliases({"rubi": "rubicon"})
    assert aliases.resolve("rubi") == "rubicon"


def test_unknown_bidder_resolves_to_itself():
    aliases = BidderAliases()
    assert aliases.resolve("appnexus") == "appnexus"
