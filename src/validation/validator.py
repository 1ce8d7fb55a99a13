import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from src.utils.conditional_logger import ConditionalLogger
from src.validation.aliases import BidderAliases
from src.validation.config import ValidatorConfig, config
from src.validation.currency import is_valid_currency
from src.validation.enforcement import (
    BidValidationEnforcement,
    PolicyAction,
    apply_policy,
    resolve_enforcement,
)
from src.validation.metrics import MetricName, Metrics
from src.validation.result import ValidationResult
from src.validation.schema import Account, AuctionContext, Bid, BidderBid, BidRequest, BidType, Imp

logger = logging.getLogger(__name__)

UNRELATED_BID_LOGGER = ConditionalLogger("not_matched_bid", logger)


@dataclass(frozen=True)
class CheckOutcome:
    """Result of a single check: optional failure message plus warnings."""

    error: Optional[str] = None
    warnings: Tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.error is not None


OK = CheckOutcome()


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ResponseBidValidator:
    """
    Validates a single bidder bid against the auction it responds to.

    Check order (stops at the first fatal failure):
        1. Common fields (id, impid, price, deal, crid) - always fatal
        2. Type specific (video needs adm or nurl) - always fatal
        3. Currency code - always fatal
        4. Corresponding imp lookup - always fatal
        5. Banner max size (banner bids only) - enforce / warn / skip
        6. Secure markup - enforce / warn / skip

    The validator holds no mutable state; concurrent calls are safe.
    """

    def __init__(
        self,
        banner_max_size_enforcement: BidValidationEnforcement,
        secure_markup_enforcement: BidValidationEnforcement,
        metrics: Metrics,
        settings: ValidatorConfig = config,
        unrelated_bid_logger: ConditionalLogger = UNRELATED_BID_LOGGER,
    ):
        if banner_max_size_enforcement is None:
            raise ValueError("banner_max_size_enforcement is required")
        if secure_markup_enforcement is None:
            raise ValueError("secure_markup_enforcement is required")
        if metrics is None:
            raise ValueError("metrics is required")

        self.banner_max_size_enforcement = banner_max_size_enforcement
        self.secure_markup_enforcement = secure_markup_enforcement
        self.metrics = metrics
        self.settings = settings
        self.unrelated_bid_logger = unrelated_bid_logger

    @classmethod
    def from_config(cls, settings: ValidatorConfig, metrics: Metrics) -> "ResponseBidValidator":
        return cls(
            settings.banner_max_size_enforcement,
            settings.secure_markup_enforcement,
            metrics,
            settings=settings,
        )

    def validate(
        self,
        bidder_bid: BidderBid,
        bidder: str,
        auction_context: AuctionContext,
        aliases: BidderAliases,
    ) -> ValidationResult:
        """
        Run all checks for one bid.

        Args:
            bidder_bid: Bid with its declared type and currency.
            bidder: Reporting name of the bidder.
            auction_context: Original request and the resolved account.
            aliases: Resolver used to attribute metrics to the canonical bidder.

        Returns:
            ValidationResult: success with warnings, or a single error plus
            the warnings gathered before the failing check.
        """
        bid = bidder_bid.bid
        account = auction_context.account
        warnings: List[str] = []

        outcome = self._validate_common_fields(bid)
        if outcome.failed:
            return self._reject(bidder, warnings, outcome)

        outcome = self._validate_type_specific(bidder_bid, bidder)
        if outcome.failed:
            return self._reject(bidder, warnings, outcome)

        outcome = self._validate_currency(bidder_bid.bid_currency)
        if outcome.failed:
            return self._reject(bidder, warnings, outcome)

        imp = self._find_corresponding_imp(bid, auction_context.bid_request)
        if imp is None:
            message = f'Bid "{bid.id}" has no corresponding imp in request'
            self.unrelated_bid_logger.warn(message, self.settings.unmatched_bid_log_probability)
            return self._reject(bidder, warnings, CheckOutcome(error=message))

        if bidder_bid.type == BidType.banner:
            outcome = self._validate_banner_fields(bid, bidder, account, imp, aliases)
            warnings.extend(outcome.warnings)
            if outcome.failed:
                return self._reject(bidder, warnings, outcome)

        outcome = self._validate_secure_markup(bid, bidder, account, imp, aliases)
        warnings.extend(outcome.warnings)
        if outcome.failed:
            return self._reject(bidder, warnings, outcome)

        return ValidationResult.success(warnings)

    @staticmethod
    def _reject(bidder: str, warnings: List[str], outcome: CheckOutcome) -> ValidationResult:
        logger.debug(f"Rejected bid from {bidder}: {outcome.error}")
        return ValidationResult.error(warnings, outcome.error)

    # -------------------------------
    # Always-fatal checks
    # -------------------------------
    @staticmethod
    def _validate_common_fields(bid: Optional[Bid]) -> CheckOutcome:
        if bid is None:
            return CheckOutcome(error="Empty bid object submitted")

        bid_id = bid.id
        if _is_blank(bid_id):
            return CheckOutcome(error="Bid missing required field 'id'")

        if _is_blank(bid.impid):
            return CheckOutcome(error=f"Bid \"{bid_id}\" missing required field 'impid'")

        price = bid.price
        if price is None:
            return CheckOutcome(error=f"Bid \"{bid_id}\" does not contain a 'price'")

        if not Decimal(price).is_finite():
            return CheckOutcome(error=f'Bid "{bid_id}" `price` is not a finite number')

        if price < 0:
            return CheckOutcome(error=f'Bid "{bid_id}" `price `has negative value')

        if price == 0 and _is_blank(bid.dealid):
            return CheckOutcome(error=f'Non deal bid "{bid_id}" has 0 price')

        if not bid.crid:
            return CheckOutcome(error=f'Bid "{bid_id}" missing creative ID')

        return OK

    def _validate_type_specific(self, bidder_bid: BidderBid, bidder: str) -> CheckOutcome:
        bid = bidder_bid.bid
        vast_specific_absent = bid.adm is None and bid.nurl is None

        if bidder_bid.type == BidType.video and vast_specific_absent:
            self.metrics.record_adapter_request_error(bidder, MetricName.badserverresponse)
            return CheckOutcome(error=f'Bid "{bid.id}" with video type missing adm and nurl')

        return OK

    @staticmethod
    def _validate_currency(currency: Optional[str]) -> CheckOutcome:
        # Missing currency is defaulted by the caller
        if _is_blank(currency):
            return OK
        if not is_valid_currency(currency):
            return CheckOutcome(error=f'BidResponse currency "{currency}" is not valid')
        return OK

    @staticmethod
    def _find_corresponding_imp(bid: Bid, bid_request: BidRequest) -> Optional[Imp]:
        for imp in bid_request.imp or []:
            if imp.id == bid.impid:
                return imp
        return None

    # -------------------------------
    # Policy-governed checks
    # -------------------------------
    def _validate_banner_fields(
        self,
        bid: Bid,
        bidder: str,
        account: Account,
        imp: Imp,
        aliases: BidderAliases,
    ) -> CheckOutcome:
        enforcement = resolve_enforcement(
            self._account_override(account, "banner_max_size_enforcement"),
            self.banner_max_size_enforcement,
        )
        if enforcement is BidValidationEnforcement.skip or not self._banner_size_is_not_valid(bid, imp):
            return OK

        return self._apply_enforcement(
            enforcement,
            lambda outcome: self.metrics.record_size_validation(aliases.resolve(bidder), account.id, outcome),
            f"Bid \"{bid.id}\" has 'w' and 'h' that are not valid. Bid dimensions: '{bid.w}x{bid.h}'",
        )

    def _validate_secure_markup(
        self,
        bid: Bid,
        bidder: str,
        account: Account,
        imp: Imp,
        aliases: BidderAliases,
    ) -> CheckOutcome:
        # Host-level policy only; accounts cannot turn this check on or off
        enforcement = self.secure_markup_enforcement
        if enforcement is BidValidationEnforcement.skip:
            return OK

        if not (self._is_imp_secure(imp) and self._markup_is_not_secure(bid)):
            return OK

        return self._apply_enforcement(
            enforcement,
            lambda outcome: self.metrics.record_secure_validation(aliases.resolve(bidder), account.id, outcome),
            f'Bid "{bid.id}" has insecure creative but should be in secure context',
        )

    @staticmethod
    def _apply_enforcement(
        enforcement: BidValidationEnforcement,
        record_metric: Callable[[MetricName], None],
        message: str,
    ) -> CheckOutcome:
        decision = apply_policy(enforcement, message)
        if decision.action is PolicyAction.FAIL:
            record_metric(MetricName.err)
            return CheckOutcome(error=decision.warning)
        if decision.action is PolicyAction.WARN:
            record_metric(MetricName.warn)
            return CheckOutcome(warnings=(decision.warning,))
        return OK

    @staticmethod
    def _account_override(account: Optional[Account], name: str) -> Optional[BidValidationEnforcement]:
        validations = account.bid_validations if account is not None else None
        return getattr(validations, name) if validations is not None else None

    # -------------------------------
    # Helpers
    # -------------------------------
    @staticmethod
    def _banner_size_is_not_valid(bid: Bid, imp: Imp) -> bool:
        max_w, max_h = ResponseBidValidator._max_size_for_banner(imp)
        return bid.w is None or bid.w > max_w or bid.h is None or bid.h > max_h

    @staticmethod
    def _max_size_for_banner(imp: Imp):
        """Largest width and height across the imp's banner formats; 0x0 if none."""
        formats = (imp.banner.format if imp.banner is not None else None) or []
        max_w = max([f.w or 0 for f in formats], default=0)
        max_h = max([f.h or 0 for f in formats], default=0)
        return max(0, max_w), max(0, max_h)

    @staticmethod
    def _is_imp_secure(imp: Imp) -> bool:
        return imp.secure == 1

    def _markup_is_not_secure(self, bid: Bid) -> bool:
        adm = bid.adm or ""
        has_insecure = any(marker in adm for marker in self.settings.insecure_markup_markers)
        has_secure = any(marker in adm for marker in self.settings.secure_markup_markers)
        return has_insecure or not has_secure
