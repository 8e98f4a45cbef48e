"""
Command line entry point to solve a single Hashiwokakero puzzle.

Usage:
    hashi-solve puzzle.txt
    hashi-solve puzzle.has --profile --show-clusters
"""

import sys
from pathlib import Path

import click

from .config import LOG_LEVEL
from .core.board import Board
from .core.errors import ConstructionError
from .core.utils import setup_logger
from .solvers import SolverConfig, get_solver


@click.command()
@click.argument('puzzle_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--no-guess', is_flag=True, help='Disable speculative trials')
@click.option('--profile', '-t', is_flag=True, help='Print execution time profile')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML solver configuration')
@click.option('--save-solution', '-s', type=click.Path(), help='Save final board to JSON file')
@click.option('--show-clusters', is_flag=True, help='List clusters under the board')
@click.option('--trace', is_flag=True, help='Log every deduction')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def main(puzzle_file, no_guess, profile, config_file, save_solution, show_clusters, trace, verbose):
    """Solve a Hashiwokakero puzzle by constraint propagation."""
    logger = setup_logger("hashi", level="DEBUG" if verbose else LOG_LEVEL)

    config = SolverConfig.from_yaml(config_file) if config_file else SolverConfig()
    if no_guess:
        config.allow_guess = False
    if profile:
        config.profile = True
    if trace:
        config.trace = True
    if verbose:
        config.verbose = True

    try:
        board = Board.load(puzzle_file)
    except (ConstructionError, OSError) as e:
        click.echo(f"error loading file: {e}", err=True)
        sys.exit(2)
    logger.debug(f"Loaded {board!r} from {puzzle_file}")

    solver = get_solver('propagation', config)
    result = solver.solve(board)

    click.echo(result.solution.render(show_clusters=show_clusters))
    _, reason = result.solution.is_solved()
    if not result.success and reason is None:
        reason = result.message
    line = f"Solved: {result.success}"
    if reason:
        line += f" ({reason})"
    click.echo(line)

    if profile and result.profile is not None:
        click.echo(result.profile.results())

    if save_solution:
        save_path = Path(save_solution)
        result.solution.save(save_path)
        click.echo(f"Solution saved to {save_path}")

    sys.exit(0 if result.success else 1)


if __name__ == '__main__':
    main()
