from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from src.validation.enforcement import BidValidationEnforcement


class BidType(str, Enum):
    """Creative type declared by the bidder adapter."""

    banner = "banner"
    video = "video"
    audio = "audio"
    native = "native"


@dataclass(slots=True)
class Format:
    w: Optional[int] = None
    h: Optional[int] = None


@dataclass(slots=True)
class Banner:
    format: Optional[List[Format]] = None


@dataclass(slots=True)
class Imp:
    """
    A placement in the original bid request.
    `secure` follows OpenRTB: 1 requires secure creatives, 0 or None does not.
    """

    id: str
    banner: Optional[Banner] = None
    secure: Optional[int] = None


@dataclass(slots=True)
class BidRequest:
    id: str
    imp: List[Imp] = field(default_factory=list)


@dataclass(slots=True)
class Bid:
    """
    A single bid as returned by a bidding partner.
    Price is kept as Decimal so that zero and negative checks are exact.
    """

    id: Optional[str]
    impid: Optional[str]
    price: Optional[Decimal]
    crid: Optional[str] = None
    dealid: Optional[str] = None
    adm: Optional[str] = None
    nurl: Optional[str] = None
    w: Optional[int] = None
    h: Optional[int] = None


@dataclass(slots=True)
class BidderBid:
    bid: Optional[Bid]
    type: BidType
    bid_currency: Optional[str] = None


@dataclass(frozen=True)
class AccountBidValidationConfig:
    """Per-account overrides. None means the validator default applies."""

    banner_max_size_enforcement: Optional[BidValidationEnforcement] = None
    secure_markup_enforcement: Optional[BidValidationEnforcement] = None


@dataclass(frozen=True)
class Account:
    id: str
    bid_validations: Optional[AccountBidValidationConfig] = None


@dataclass(slots=True)
class AuctionContext:
    bid_request: BidRequest
    account: Account
