"""HTTP benchmark for the Article API read endpoints."""
import asyncio
import argparse
import statistics
import time

import httpx

DEFAULT_BASE_URL = "http://localhost:8000"

ENDPOINTS = [
    ("GET /articles", "/articles"),
    ("GET /articles?page=2&pageSize=50", "/articles?page=2&pageSize=50"),
    ("GET /articles?sortDirection=asc", "/articles?sortDirection=asc"),
    ("GET /articles/search (30 days)", "/articles/search?from=2024-01-01&to=2024-01-31"),
    ("GET /articles/1", "/articles/1"),
    ("GET /metrics", "/metrics"),
    ("GET /health", "/health"),
]


async def benchmark_endpoint(client: httpx.AsyncClient, name: str, url: str, iterations: int = 50):
    times = []
    query_counts = []
    errors = 0

    # Warmup
    for _ in range(3):
        try:
            await client.get(url)
        except httpx.HTTPError:
            pass

    for _ in range(iterations):
        try:
            start = time.perf_counter()
            resp = await client.get(url)
            elapsed = (time.perf_counter() - start) * 1000
        except httpx.HTTPError:
            errors += 1
            continue

        if resp.status_code == 200:
            times.append(elapsed)
            qc = resp.headers.get("X-Query-Count")
            if qc is not None:
                query_counts.append(int(qc))
        else:
            errors += 1

    if not times:
        return {"name": name, "error": f"All {iterations} requests failed"}

    ordered = sorted(times)
    return {
        "name": name,
        "avg_ms": round(statistics.mean(times), 2),
        "p50_ms": round(ordered[len(ordered) // 2], 2),
        "p95_ms": round(ordered[int(len(ordered) * 0.95)], 2),
        "p99_ms": round(ordered[int(len(ordered) * 0.99)], 2),
        "queries": round(statistics.mean(query_counts), 1) if query_counts else "N/A",
        "errors": errors,
    }


async def run_benchmark(base_url: str, iterations: int = 50):
    print("=" * 80)
    print(f"Article API Benchmark — {iterations} iterations per endpoint")
    print(f"Target: {base_url}")
    print("=" * 80)

    async with httpx.AsyncClient() as client:
        try:
            resp = await client.get(f"{base_url}/health")
        except httpx.HTTPError as e:
            print(f"ERROR: Cannot connect to {base_url} — {e}")
            return
        if resp.status_code != 200:
            print(f"ERROR: Health check failed ({resp.status_code})")
            return
        print(f"Health: {resp.json()}")

        print()
        print(f"{'Endpoint':<40} {'Avg':>8} {'P50':>8} {'P95':>8} {'P99':>8} {'Queries':>8} {'Err':>4}")
        print("-" * 80)

        for name, path in ENDPOINTS:
            result = await benchmark_endpoint(client, name, f"{base_url}{path}", iterations)
            if "error" in result:
                print(f"{result['name']:<40} {'ERROR':>8}")
            else:
                print(
                    f"{result['name']:<40} "
                    f"{result['avg_ms']:>7.1f}ms "
                    f"{result['p50_ms']:>7.1f}ms "
                    f"{result['p95_ms']:>7.1f}ms "
                    f"{result['p99_ms']:>7.1f}ms "
                    f"{str(result['queries']):>8} "
                    f"{result['errors']:>4}"
                )

        print("-" * 80)
        print("\nBenchmark complete.")


def main():
    parser = argparse.ArgumentParser(description="Benchmark the Article API")
    parser.add_argument("-n", "--iterations", type=int, default=50, help="Iterations per endpoint")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    args = parser.parse_args()
    asyncio.run(run_benchmark(args.base_url.rstrip("/"), args.iterations))


if __name__ == "__main__":
    main()
