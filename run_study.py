"""
Run the Edit-Interface Simulation Study

Simulates users making edit attempts with an old and a new interface and
compares how well pooled, random-intercept, Bayesian and paired analyses
recover the true interface effect.

Usage:
    # Full study (100 users, seed 42)
    uv run python run_study.py

    # Skip the Bayesian model
    uv run python run_study.py --skip-bayesian

    # Different population
    uv run python run_study.py --n-users 300 --seed 7

    # Run quietly
    uv run python run_study.py --quiet
"""

import argparse
import sys

from multilevel_ab.simulation import SimulationConfig
from multilevel_ab.pipelines import run_interface_study


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run the edit-interface multilevel simulation study",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_study.py
  python run_study.py --skip-bayesian
  python run_study.py --n-users 300 --seed 7 --top-k 20
  python run_study.py --draws 2000 --tune 2000
        """
    )

    parser.add_argument('--seed', type=int, default=42, help='Random seed (default: 42)')
    parser.add_argument('--n-users', type=int, default=100, help='Number of users (default: 100)')
    parser.add_argument('--beta0', type=float, default=-0.7, help='True baseline log-odds (default: -0.7)')
    parser.add_argument('--beta1', type=float, default=0.8, help='True interface effect (default: 0.8)')
    parser.add_argument('--top-k', type=int, default=10,
                        help='Most active users dropped in the sensitivity refit (default: 10)')
    parser.add_argument('--skip-bayesian', action='store_true', help='Do not sample the Bayesian model')
    parser.add_argument('--draws', type=int, default=1000, help='Posterior draws per chain (default: 1000)')
    parser.add_argument('--tune', type=int, default=1000, help='Tuning steps per chain (default: 1000)')
    parser.add_argument('--chains', type=int, default=2, help='MCMC chains (default: 2)')
    parser.add_argument('--quiet', action='store_true', help='Suppress verbose output')

    args = parser.parse_args()
    verbose = not args.quiet

    try:
        config = SimulationConfig(
            beta0=args.beta0,
            beta1=args.beta1,
            n_users=args.n_users,
            random_seed=args.seed,
        )
        results = run_interface_study(
            config=config,
            top_k=args.top_k,
            run_bayesian=not args.skip_bayesian,
            bayes_kwargs={'draws': args.draws, 'tune': args.tune, 'chains': args.chains},
            verbose=verbose,
        )
        if not verbose:
            print(results['recovery'].to_string(index=False))
        return 0

    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
