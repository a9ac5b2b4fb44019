"""
Plot Reserve Comparison
=======================

Figures for the fixed vs risk-adaptive comparison:
1. Tier balances over time for both policies, with the 7-day VaR threshold
2. Sensitivity of return / shortfalls to one swept parameter
"""

from typing import Dict, Optional

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

from comparison import ComparisonReport

sns.set_palette("husl")
plt.rcParams['font.size'] = 10
plt.rcParams['axes.labelsize'] = 11
plt.rcParams['axes.titlesize'] = 12
plt.rcParams['legend.fontsize'] = 9

TIER_COLORS = {'l1': '#2E86AB', 'l2': '#A23B72', 'l3': '#F18F01'}
TIER_LABELS = {'l1': 'L1 (cash)', 'l2': 'L2 (short)', 'l3': 'L3 (term)'}
SCALE = 10000  # display amounts in 10k units


def plot_tier_paths(report: ComparisonReport,
                    save_path: Optional[str] = 'figure_tier_paths.png',
                    show: bool = True):
    """
    Stacked tier balances per policy with the compliance threshold.

    Requires a report produced with ``record_daily=True``.
    """
    if not report.daily:
        raise ValueError("report has no daily trace; run with record_daily=True")

    days = np.array([row['day'] for row in report.daily])
    threshold = np.array([row['threshold'] for row in report.daily]) / SCALE
    demand = np.array([row['demand'] for row in report.daily]) / SCALE

    fig, axes = plt.subplots(3, 1, figsize=(11, 10), sharex=True)
    fig.suptitle('Reserve Tiers: Fixed Ratio vs Risk-Adaptive (VaR)',
                 fontsize=14, fontweight='bold')

    for ax, key, policy in zip(axes[:2], ('fixed', 'adaptive'),
                               (report.fixed, report.adaptive)):
        stacks = [np.array([row[key][tier] for row in report.daily]) / SCALE
                  for tier in ('l1', 'l2', 'l3')]
        ax.stackplot(days, *stacks,
                     labels=[TIER_LABELS[t] for t in ('l1', 'l2', 'l3')],
                     colors=[TIER_COLORS[t] for t in ('l1', 'l2', 'l3')],
                     alpha=0.8)
        ax.step(days, threshold, where='post', color='red', ls='--', lw=1.5,
                label='VaR(7d) threshold')

        shortfall_days = days[[row[f'{key}_shortfall'] for row in report.daily]]
        for d in shortfall_days:
            ax.axvline(d, color='black', alpha=0.15, lw=1)

        ax.set_ylabel('Balance (10k)', fontweight='bold')
        ax.set_title(f"{policy.name}: return {policy.return_rate_pct:.2f}%, "
                     f"{policy.shortfall_count} shortfalls, "
                     f"compliance {policy.compliance_rate_pct:.0f}%",
                     fontweight='bold')
        ax.grid(True, alpha=0.3)
        ax.legend(loc='upper right', framealpha=0.9)

    axes[2].bar(days, demand, color='gray', alpha=0.7, label='Daily redemption')
    axes[2].set_xlabel('Day', fontweight='bold')
    axes[2].set_ylabel('Redemption (10k)', fontweight='bold')
    axes[2].grid(True, alpha=0.3)
    axes[2].legend(loc='upper left')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"✓ Saved figure to: {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig, axes


def plot_sweep(results: Dict,
               save_path: Optional[str] = 'figure_sweep.png',
               show: bool = True):
    """Return and shortfall count of both policies across a sweep"""
    values = np.array(results['value'], dtype=float)
    name = results['parameter']

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(13, 5))

    ax1.plot(values, results['fixed_return_pct'], 'o-', lw=2.5, label='Fixed ratio')
    ax1.plot(values, results['adaptive_return_pct'], 's-', lw=2.5, label='Risk-adaptive')
    ax1.set_xlabel(name, fontweight='bold')
    ax1.set_ylabel('Annualized return (%)', fontweight='bold')
    ax1.set_title('Yield', fontweight='bold')
    ax1.grid(True, alpha=0.3)
    ax1.legend()

    ax2.plot(values, results['fixed_shortfalls'], 'o-', lw=2.5, label='Fixed ratio')
    ax2.plot(values, results['adaptive_shortfalls'], 's-', lw=2.5, label='Risk-adaptive')
    ax2.set_xlabel(name, fontweight='bold')
    ax2.set_ylabel('L1 shortfalls', fontweight='bold')
    ax2.set_title('Liquidity stress', fontweight='bold')
    ax2.grid(True, alpha=0.3)
    ax2.legend()

    fig.suptitle(f'Policy sensitivity to {name}', fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"✓ Saved figure to: {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig, (ax1, ax2)
