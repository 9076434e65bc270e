"""CLI utility functions."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from slide_solver.core.data_models import Board

WALL_GLYPH = "█"


def setup_logging(level: int = logging.INFO,
                  format_string: Optional[str] = None) -> None:
    """Setup logging configuration.

    Args:
        level: Logging level
        format_string: Custom format string
    """
    if format_string is None:
        if level <= logging.DEBUG:
            format_string = "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s"
        else:
            format_string = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Reduce noise from some libraries
    logging.getLogger('redis').setLevel(logging.WARNING)


def render_board(board: Board, labels: Optional[Sequence[Any]] = None) -> str:
    """Draw a board as a box grid.

    Walls are drawn as a solid block and the blank as an empty cell. When
    ``labels`` is given (one entry per cell) it replaces the symbols of the
    non-wall cells, e.g. per-tile heuristic distances.

    Args:
        board: Board to draw
        labels: Optional per-cell labels in row-major order

    Returns:
        Multi-line string without a trailing newline
    """
    if labels is not None and len(labels) != board.size:
        raise ValueError(f"Expected {board.size} labels, got {len(labels)}")

    texts: List[str] = []
    for idx, cell in enumerate(board.cells):
        if cell.is_wall:
            texts.append(WALL_GLYPH)
        elif labels is not None:
            texts.append(str(labels[idx]))
        elif cell.is_blank:
            texts.append(" ")
        else:
            texts.append(cell.symbol)

    inner = max(len(t) for t in texts) + 2
    rule = "─" * inner

    def border(left: str, mid: str, right: str) -> str:
        return left + mid.join([rule] * board.width) + right

    lines = [border("┌", "┬", "┐")]
    for row in range(board.height):
        row_texts = texts[row * board.width:(row + 1) * board.width]
        lines.append("│" + "│".join(t.center(inner) for t in row_texts) + "│")
        if row < board.height - 1:
            lines.append(border("├", "┼", "┤"))
    lines.append(border("└", "┴", "┘"))

    return "\n".join(lines)


def save_results(results: Dict[str, Any],
                 output_path: Union[str, Path],
                 pretty: bool = True) -> None:
    """Save results to JSON file.

    Args:
        results: Results dictionary
        output_path: Output file path
        pretty: Whether to pretty-print JSON
    """
    output_path = Path(output_path)

    # Ensure output directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        if pretty:
            json.dump(results, f, indent=2, sort_keys=True, default=str)
        else:
            json.dump(results, f, default=str)


def format_duration(seconds: float) -> str:
    """Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 0.001:
        return f"{seconds*1000000:.1f}µs"
    elif seconds < 1:
        return f"{seconds*1000:.1f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.1f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs:.1f}s"


def create_result_summary(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Create summary statistics from batch results.

    Args:
        results: List of individual board results

    Returns:
        Summary statistics dictionary
    """
    if not results:
        return {
            'total_boards': 0,
            'solved_boards': 0,
            'unsolved_boards': 0,
            'cached_boards': 0,
            'invalid_boards': 0,
            'success_rate': 0.0,
            'average_time': 0.0,
            'median_time': 0.0,
            'p95_time': 0.0,
            'total_time': 0.0,
            'min_time': 0.0,
            'max_time': 0.0,
            'average_moves': 0.0
        }

    solved = [r for r in results if r.get('success', False)]
    times = sorted(r.get('computation_time', 0.0) for r in results)

    total_boards = len(results)
    n = len(times)
    if n % 2 == 0:
        median_time = (times[n//2 - 1] + times[n//2]) / 2
    else:
        median_time = times[n//2]

    total_time = sum(times)
    move_counts = [len(r['moves']) for r in solved]

    return {
        'total_boards': total_boards,
        'solved_boards': len(solved),
        'unsolved_boards': total_boards - len(solved),
        'cached_boards': sum(1 for r in results if r.get('cached', False)),
        'invalid_boards': sum(1 for r in results if r.get('error')),
        'success_rate': len(solved) / total_boards,
        'average_time': total_time / total_boards,
        'median_time': median_time,
        'p95_time': times[min(int(0.95 * n), n - 1)],
        'total_time': total_time,
        'min_time': times[0],
        'max_time': times[-1],
        'average_moves': sum(move_counts) / len(move_counts) if move_counts else 0.0
    }


def print_summary(summary: Dict[str, Any]) -> None:
    """Print batch processing summary.

    Args:
        summary: Summary statistics dictionary
    """
    print("\n" + "="*60)
    print("BATCH PROCESSING SUMMARY")
    print("="*60)

    print(f"Total boards:     {summary['total_boards']}")
    print(f"Solved:           {summary['solved_boards']} ({summary['success_rate']*100:.1f}%)")
    print(f"Unsolved:         {summary['unsolved_boards']}")
    print(f"Invalid:          {summary['invalid_boards']}")
    print(f"From cache:       {summary['cached_boards']}")
    print(f"Average moves:    {summary['average_moves']:.1f}")

    print(f"\nTiming Statistics:")
    print(f"Total time:       {format_duration(summary['total_time'])}")
    print(f"Average time:     {format_duration(summary['average_time'])}")
    print(f"Median time:      {format_duration(summary['median_time'])}")
    print(f"95th percentile:  {format_duration(summary['p95_time'])}")
    print(f"Min time:         {format_duration(summary['min_time'])}")
    print(f"Max time:         {format_duration(summary['max_time'])}")
