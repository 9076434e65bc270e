"""Command-line interface for the sliding puzzle solver.

This module provides CLI commands for solving single boards and batch files.
"""

from .main import main_cli
from .commands import SlidePuzzleSolver, solve_command, batch_command, show_command, config_command
from .utils import setup_logging, render_board, save_results

__all__ = [
    'main_cli',
    'SlidePuzzleSolver',
    'solve_command',
    'batch_command',
    'show_command',
    'config_command',
    'setup_logging',
    'render_board',
    'save_results'
]
