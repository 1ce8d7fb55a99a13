import random
import statistics
import time
from decimal import Decimal

import psutil
from prometheus_client import CollectorRegistry

from src.validation.aliases import BidderAliases
from src.validation.enforcement import BidValidationEnforcement
from src.validation.metrics import PrometheusMetrics
from src.validation.schema import (
    Account,
    AuctionContext,
    Banner,
    Bid,
    BidderBid,
    BidRequest,
    BidType,
    Format,
    Imp,
)
from src.validation.validator import ResponseBidValidator

SIZES = [(300, 250), (728, 90), (320, 50), (160, 600)]


def generate_context(n_imps=10):
    imps = [
        Imp(id=f"imp_{i}", banner=Banner(format=[Format(w=w, h=h) for w, h in SIZES]), secure=random.choice([0, 1]))
        for i in range(n_imps)
    ]
    return AuctionContext(bid_request=BidRequest(id="bench", imp=imps), account=Account(id="acc_1"))


def generate_random_bid(i, n_imps=10):
    w, h = random.choice(SIZES)
    scheme = random.choice(["https", "http"])
    return BidderBid(
        bid=Bid(
            id=f"bench_{i}",
            impid=f"imp_{random.randint(0, n_imps)}",  # occasionally unmatched
            price=Decimal(str(round(random.uniform(0.0, 5.0), 2))),
            crid=f"cr_{random.randint(1, 500)}",
            adm=f"<a href='{scheme}://cdn.example.com/ad.js'></a>",
            w=w + random.choice([0, 0, 0, 1]),
            h=h,
        ),
        type=BidType.banner,
        bid_currency=random.choice(["USD", "EUR", "XXZ", None]),
    )


def benchmark(n=100000):
    print("Initializing validator...")
    validator = ResponseBidValidator(
        BidValidationEnforcement.warn,
        BidValidationEnforcement.enforce,
        PrometheusMetrics(registry=CollectorRegistry()),
    )
    context = generate_context()
    aliases = BidderAliases({"bench_alias": "bench"})

    print(f"Generating {n} bids...")
    bids = [generate_random_bid(i) for i in range(n)]

    print("Warming up...")
    for _ in range(100):
        validator.validate(bids[0], "bench_alias", context, aliases)

    print("Running benchmark...")
    latencies = []
    rejected = 0
    start_mem = psutil.Process().memory_info().rss / 1024 / 1024

    for bid in bids:
        t0 = time.perf_counter_ns()
        result = validator.validate(bid, "bench_alias", context, aliases)
        t1 = time.perf_counter_ns()
        latencies.append((t1 - t0) / 1_000.0)  # us
        if result.has_errors:
            rejected += 1

    end_mem = psutil.Process().memory_info().rss / 1024 / 1024

    ordered = sorted(latencies)
    avg = statistics.mean(latencies)
    p50 = statistics.median(latencies)
    p95 = ordered[int(n * 0.95)]
    p99 = ordered[int(n * 0.99)]

    print("\n" + "="*30)
    print(" BENCHMARK RESULTS")
    print("="*30)
    print(f"Bids validated:     {n}")
    print(f"Rejected:           {rejected}")
    print(f"Average Latency:    {avg:.2f} us")
    print(f"P50 Latency:        {p50:.2f} us")
    print(f"P95 Latency:        {p95:.2f} us")
    print(f"P99 Latency:        {p99:.2f} us")
    print("-" * 30)
    print(f"Memory Usage:       {end_mem:.2f} MB")
    print(f"Memory Growth:      {end_mem - start_mem:.2f} MB")
    print("="*30)

    if avg > 100.0:
        print("FAILED: Average latency > 100us")
        exit(1)
    else:
        print("PASSED: Latency is within SLA")


if __name__ == "__main__":
    benchmark(100000)
