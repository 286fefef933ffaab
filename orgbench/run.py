"""Command line entry point: validate domains, match titles, list KPIs."""

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from orgbench.config import load_engine_config
from orgbench.domains import benchmarks, compensation, health, kpis, roles, scenarios, workforce
from orgbench.domains.kpis import KPI_REGISTRY, KPICategory
from orgbench.domains.roles import InMemoryMappingStore, MappingContext, RoleTaxonomyMatcher, seed_library
from orgbench.errors import EngineError

type DomainResult = dict[str, bool | str | int | float]

console = Console()

DOMAINS = {
    "roles": roles,
    "benchmarks": benchmarks,
    "kpis": kpis,
    "health": health,
    "compensation": compensation,
    "workforce": workforce,
    "scenarios": scenarios,
}


def validate_all() -> list[DomainResult]:
    results = []
    for name, module in DOMAINS.items():
        match module.validate():
            case {"status": "ok", **rest}:
                results.append({"domain": name, "valid": True, **rest})
            case {"status": "error", "message": msg}:
                results.append({"domain": name, "valid": False, "error": msg})
            case {"status": "skipped", "reason": reason}:
                console.print(f"[yellow]Skipping {name}: {reason}[/yellow]")
            case _:
                results.append({"domain": name, "valid": False, "error": "Unknown validation result"})
    return results


def print_validation(results: list[DomainResult]) -> bool:
    table = Table(title="Validation Results")
    table.add_column("Domain")
    table.add_column("Valid")
    table.add_column("Details")

    for r in results:
        status = "[green]✓[/green]" if r["valid"] else "[red]✗[/red]"
        detail = r.get("error") or ", ".join(
            f"{k}={v}" for k, v in r.items() if k not in ("domain", "valid")
        ) or "OK"
        table.add_row(r["domain"], status, str(detail))

    console.print(table)
    return all(r["valid"] for r in results)


def print_matches(titles: list[str], env: str, industry: str | None, region: str | None) -> None:
    config = load_engine_config(env)
    store = InMemoryMappingStore()
    seed_library(store)
    matcher = RoleTaxonomyMatcher(store, config=config)
    matches = matcher.match_batch(titles, MappingContext(industry=industry, region=region))

    table = Table(title="Role Matches")
    table.add_column("Title")
    table.add_column("Standardized")
    table.add_column("Family")
    table.add_column("Seniority")
    table.add_column("Match")
    table.add_column("Confidence", justify="right")
    for title, m in matches.items():
        color = "green" if m.is_resolved else "red"
        table.add_row(
            title, m.standardized_title, m.role_family or "-", m.seniority or "-",
            f"[{color}]{m.match_type}[/{color}]", f"{m.confidence:.2f}",
        )
    console.print(table)


def print_kpis(category: str | None) -> None:
    table = Table(title="KPI Registry")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Unit")
    table.add_column("Range (low / median / high)")
    table.add_column("Direction")
    for definition in KPI_REGISTRY.values():
        if category and definition.category != category:
            continue
        band = definition.benchmark_range
        band_text = f"{band.low:g} / {band.median:g} / {band.high:g}" if band else "-"
        direction = "higher" if definition.higher_is_better else "lower"
        table.add_row(definition.id, definition.name, str(definition.category), str(definition.unit), band_text, direction)
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Workforce analytics and benchmarking engine")
    parser.add_argument("--validate", action="store_true", help="Run the self-checks of every domain")
    parser.add_argument("--match", nargs="+", metavar="TITLE", help="Match job titles against the taxonomy")
    parser.add_argument("--industry", type=str, help="Industry context for --match")
    parser.add_argument("--region", type=str, help="Region context for --match")
    parser.add_argument("--kpis", action="store_true", help="List the KPI registry")
    parser.add_argument("--category", choices=[c.value for c in KPICategory], help="Filter --kpis by category")
    parser.add_argument("--env", default="production", help="Engine configuration preset")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        if args.validate:
            if not print_validation(validate_all()):
                sys.exit(1)
        elif args.match:
            print_matches(args.match, args.env, args.industry, args.region)
        elif args.kpis:
            print_kpis(args.category)
        else:
            parser.print_help()
    except EngineError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
