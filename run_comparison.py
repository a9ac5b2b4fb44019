"""
Reserve Strategy Comparison Driver
==================================

Command-line entry point:
    compare  - one fixed vs risk-adaptive run on a demand scenario
    sweep    - re-run over a grid of one configuration parameter

Results print as a report; ``--output`` saves JSON, ``--plot`` saves a figure.
"""

import argparse
import json
import logging
from pathlib import Path

from comparison import ComparisonReport, run_comparison
from demand_generator import DEMAND_SCENARIOS, generate_pair, load_series
from parameters import SimulationConfig
from scenario_sweep import sweep_parameter, summarize_sweep

logger = logging.getLogger(__name__)

INT_FIELDS = {'window_size', 'min_samples', 'short_horizon_days',
              'long_horizon_days', 'rebalance_every_days'}


def format_amount(amount: float) -> str:
    return f"HKD {amount / 1e6:,.2f}M"


def _csv_values(name: str, raw: str) -> list:
    cast = int if name in INT_FIELDS else float
    return [cast(x) for x in str(raw).split(",") if str(x).strip()]


def _config_from_args(args) -> SimulationConfig:
    return SimulationConfig(
        confidence=args.confidence,
        window_size=args.window,
        min_samples=args.min_samples,
        rebalance_every_days=args.cadence,
        initial_reserve=args.reserve,
        recovery_base_multiplier=args.recovery_multiplier,
    )


def _load_demand(args):
    history, future = generate_pair(args.scenario, seed=args.seed)
    if args.history_file:
        loaded = load_series(args.history_file)
        if loaded is None:
            raise SystemExit(f"Could not read history series from {args.history_file}")
        history = loaded
    if args.future_file:
        loaded = load_series(args.future_file)
        if loaded is None:
            raise SystemExit(f"Could not read future series from {args.future_file}")
        future = loaded
    return history, future


def print_scenario(args) -> None:
    pair = DEMAND_SCENARIOS[args.scenario]
    print(f"\n📈 DEMAND SCENARIO: {args.scenario}")
    for label, part, override in (('history', pair.history, args.history_file),
                                  ('future', pair.future, args.future_file)):
        if override:
            print(f"  {label}: loaded from {override}")
        else:
            print(f"  {label}: {part.days} days"
                  + (f", {part.description}" if part.description else ""))
    for note in pair.notes:
        print(f"  • {note}")


def print_policy(report) -> None:
    print(f"  Policy: {report.name}")
    print(f"  Annualized return: {format_amount(report.annualized_return)} "
          f"({report.return_rate_pct:.2f}%)")
    print(f"  L1 shortfalls: {report.shortfall_count}")
    print(f"    - L2→L1 refills: {report.l2_refill_count} "
          f"(total {format_amount(report.l2_refill_amount)})")
    print(f"    - L3→L1 refills: {report.l3_refill_count} "
          f"(total {format_amount(report.l3_refill_amount)})")
    print(f"  Max liquidity gap: {format_amount(report.max_gap)}")
    print(f"  LCR compliance: {report.compliance_rate_pct:.2f}%")
    print(f"  Risk-adjusted return: {format_amount(report.risk_adjusted_return)}")
    if report.unpaid_total > 0 or report.recovery_count > 0:
        print(f"  ⚠️  Unpaid redemptions: {format_amount(report.unpaid_total)} "
              f"({report.recovery_count} reserve re-seeds)")


def print_report(report: ComparisonReport) -> None:
    print("=" * 60)
    print("🧪 RESERVE STRATEGY COMPARISON")
    print("=" * 60)

    print("\n📊 RISK CALIBRATION")
    print(f"  VaR(7d, {report.risk_summary.get('confidence', 0.95)*100:.0f}%): "
          f"{format_amount(report.initial_var7)}")
    print(f"  VaR(30d): {format_amount(report.initial_var30)}")
    print(f"  Initial reserve: {format_amount(report.initial_reserve)}")

    print("\n【Fixed ratio】")
    print_policy(report.fixed)
    print("\n【Risk-adaptive (VaR)】")
    print_policy(report.adaptive)

    d = report.differential

    def mark(x):
        return '✅' if x > 0 else '❌'

    print("\n【Differential】")
    print(f"Return uplift: {d['return_rate_delta_pct']:.2f}% {mark(d['return_rate_delta_pct'])}")
    print(f"Shortfalls avoided: {d['shortfall_reduction']} {mark(d['shortfall_reduction'])}")
    print(f"  - fewer L2 refills: {d['l2_refill_count_reduction']} "
          f"{mark(d['l2_refill_count_reduction'])}")
    print(f"  - fewer L3 refills: {d['l3_refill_count_reduction']} "
          f"{mark(d['l3_refill_count_reduction'])}")
    print(f"LCR compliance uplift: {d['compliance_rate_delta_pct']:.2f}% "
          f"{mark(d['compliance_rate_delta_pct'])}")
    print(f"Max gap reduction: {format_amount(d['max_gap_reduction'])}")


def _save_json(payload: dict, filename: str) -> None:
    with open(filename, 'w') as f:
        json.dump(payload, f, indent=2)
    print(f"\n💾 Saved to: {filename}")


def cmd_compare(args) -> int:
    config = _config_from_args(args)
    history, future = _load_demand(args)
    report = run_comparison(history, future, config, record_daily=bool(args.plot))
    print_report(report)
    print_scenario(args)

    if args.output:
        _save_json(report.to_dict(), args.output)
    if args.plot:
        from plot_comparison import plot_tier_paths
        plot_tier_paths(report, save_path=args.plot, show=False)
    return 0


def cmd_sweep(args) -> int:
    config = _config_from_args(args)
    history, future = _load_demand(args)
    values = _csv_values(args.parameter, args.values)
    results = sweep_parameter(args.parameter, values, history, future, config)
    summary = summarize_sweep(results)

    print("=" * 70)
    print(f"🔍 SWEEP: {args.parameter}")
    print("=" * 70)
    print(f"  {'Value':<10} {'Fixed %':<10} {'Adapt %':<10} {'Fixed SF':<10} "
          f"{'Adapt SF':<10} {'Adapt LCR%':<10}")
    print("  " + "-" * 62)
    for i, value in enumerate(results['value']):
        print(f"  {value:<10} "
              f"{results['fixed_return_pct'][i]:>7.2f}   "
              f"{results['adaptive_return_pct'][i]:>7.2f}   "
              f"{results['fixed_shortfalls'][i]:>7d}   "
              f"{results['adaptive_shortfalls'][i]:>7d}   "
              f"{results['adaptive_compliance_pct'][i]:>8.1f}")
    print(f"\n  {summary['interpretation']}")
    print_scenario(args)

    if args.output:
        _save_json({'sweep_results': results, 'summary': summary}, args.output)
    if args.plot:
        from plot_comparison import plot_sweep
        plot_sweep(results, save_path=args.plot, show=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="reserve-compare",
        description="Compare fixed-ratio and VaR-adaptive tiered liquidity reserves.",
    )
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--scenario", choices=sorted(DEMAND_SCENARIOS), default="baseline")
    common.add_argument("--seed", type=int, default=42)
    common.add_argument("--history-file", type=Path, default=None,
                        help="JSON list of daily amounts replacing the generated history.")
    common.add_argument("--future-file", type=Path, default=None,
                        help="JSON list of daily amounts replacing the generated future.")
    common.add_argument("--confidence", type=float, default=0.95)
    common.add_argument("--window", type=int, default=100)
    common.add_argument("--min-samples", type=int, default=30,
                        help="Observations needed before the empirical VaR replaces the 2x mean fallback.")
    common.add_argument("--cadence", type=int, default=7, help="Rebalance every N days.")
    common.add_argument("--reserve", type=float, default=10000 * 10000)
    common.add_argument("--recovery-multiplier", type=float, default=100.0)
    common.add_argument("--output", default=None, help="Write results as JSON.")
    common.add_argument("--plot", default=None, help="Write a PNG figure.")

    sub = p.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("compare", parents=[common], help="Run one comparison.")
    c.set_defaults(func=cmd_compare)

    s = sub.add_parser("sweep", parents=[common], help="Sweep one configuration parameter.")
    s.add_argument("--parameter", default="confidence")
    s.add_argument("--values", default="0.90,0.95,0.975,0.99",
                   help="Comma-separated values to test.")
    s.set_defaults(func=cmd_sweep)

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ValueError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
