"""CLI command implementations."""

import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from omegaconf import DictConfig

from slide_solver.caching import CacheManager, create_cache_manager
from slide_solver.config import (
    ConfigManager, ConfigValidationError, check_config_consistency, load_config, validate_config
)
from slide_solver.core.data_models import FormatError, canonical_target, parse_board
from slide_solver.integration.io import (
    UNSOLVABLE, BatchEntry, read_answers, read_batch, verify_answers, write_answers
)
from slide_solver.search.astar import create_astar_searcher
from slide_solver.search.heuristics import WallPenaltyHeuristic
from slide_solver.search.parallel import create_parallel_searcher

from .utils import create_result_summary, format_duration, print_summary, render_board, save_results

logger = logging.getLogger(__name__)

EXIT_UNSOLVED = 2


class SlidePuzzleSolver:
    """Configured solver: search engine plus memo cache."""

    def __init__(self, config_overrides: Optional[List[str]] = None,
                 config: Optional[DictConfig] = None):
        """Initialize the solver.

        Args:
            config_overrides: Hydra overrides applied when loading the configuration
            config: Already loaded configuration (skips loading)
        """
        if config is None:
            try:
                config = load_config(overrides=config_overrides or [])
            except Exception as e:
                logger.error(f"Failed to load configuration: {e}")
                raise
        self.config = config

        solver_config = config.get('solver', {})
        search_config = config.get('search', {})
        self.engine = solver_config.get('engine', 'sequential')
        self.astar_config = search_config.get('astar', {})
        self.num_workers = search_config.get('parallel', {}).get('num_workers', 24)

        self.cache_manager: Optional[CacheManager] = None
        if solver_config.get('use_cache', True):
            self.cache_manager = create_cache_manager(config.get('system', {}).get('caching'))

        self._lock = threading.Lock()
        self.boards_solved = 0
        self.boards_unsolved = 0
        self.cache_hits = 0

        logger.info(f"Slide puzzle solver initialized (engine: {self.engine})")

    def _create_searcher(self):
        """A fresh searcher per board, so concurrent solves never share statistics."""
        threshold = self.astar_config.get('heuristic_threshold')
        max_iterations = self.astar_config.get('max_iterations', 1_000_000)
        max_time = self.astar_config.get('max_computation_time')
        tracking = self.astar_config.get('statistics_tracking', True)

        if self.engine == 'parallel':
            return create_parallel_searcher(
                num_workers=self.num_workers,
                heuristic_threshold=threshold,
                max_iterations=max_iterations,
                max_computation_time=max_time,
                statistics_tracking=tracking
            )
        return create_astar_searcher(
            heuristic_threshold=threshold,
            max_iterations=max_iterations,
            max_computation_time=max_time,
            statistics_tracking=tracking
        )

    def solve_text(self, text: str, use_cache: bool = True) -> Dict[str, Any]:
        """Solve one board given in its text encoding.

        Args:
            text: ``"<w>,<h>,<symbols>"``
            use_cache: Whether to consult and update the memo cache

        Returns:
            Result dictionary (``success``, ``moves``, ``cached``,
            ``computation_time``, ``search_stats``, ``error``)
        """
        start_time = time.perf_counter()
        text = text.strip()
        result: Dict[str, Any] = {
            'board': text,
            'success': False,
            'moves': None,
            'cached': False,
            'computation_time': 0.0,
            'search_stats': {},
            'error': None
        }

        try:
            board = parse_board(text)
        except FormatError as e:
            logger.warning(f"Skipping malformed board {text!r}: {e}")
            result['error'] = str(e)
            result['computation_time'] = time.perf_counter() - start_time
            return result

        cache = self.cache_manager if use_cache else None
        if cache is not None:
            cached_moves = cache.get_moves(text)
            if cached_moves is not None:
                result.update({
                    'success': True,
                    'moves': cached_moves,
                    'cached': True,
                    'computation_time': time.perf_counter() - start_time
                })
                with self._lock:
                    self.cache_hits += 1
                    self.boards_solved += 1
                return result

        searcher = self._create_searcher()
        search_result = searcher.search(board)

        search_stats = searcher.get_search_stats()
        search_stats['termination_reason'] = search_result.termination_reason
        search_stats['engine'] = self.engine
        if search_result.heuristic_stats is not None:
            search_stats['heuristic'] = search_result.heuristic_stats
        result.update({
            'success': search_result.success,
            'moves': search_result.move_string,
            'search_stats': search_stats,
            'computation_time': time.perf_counter() - start_time
        })

        if search_result.success and cache is not None:
            cache.set_moves(text, search_result.move_string)

        with self._lock:
            if search_result.success:
                self.boards_solved += 1
            else:
                self.boards_unsolved += 1

        return result

    def solve_batch(self, entries: Iterable[BatchEntry], threads: int = 1,
                    use_cache: bool = True) -> List[Dict[str, Any]]:
        """Solve every board of a batch.

        Args:
            entries: Boards with their 1-based batch indices
            threads: Number of boards solved concurrently
            use_cache: Whether to consult and update the memo cache

        Returns:
            Result dictionaries (with ``index``) in batch order
        """
        entries = list(entries)

        def process_entry(entry: BatchEntry) -> Dict[str, Any]:
            result = self.solve_text(entry.text, use_cache=use_cache)
            result['index'] = entry.index
            logger.info(f"Board {entry.index}: {result['moves'] if result['success'] else UNSOLVABLE}")
            return result

        results: List[Dict[str, Any]] = []
        if threads <= 1:
            for entry in entries:
                results.append(process_entry(entry))
        else:
            with ThreadPoolExecutor(max_workers=threads) as executor:
                futures = [executor.submit(process_entry, entry) for entry in entries]
                for future in as_completed(futures):
                    results.append(future.result())

        results.sort(key=lambda r: r['index'])
        return results

    def get_stats(self) -> Dict[str, Any]:
        """Get solver statistics."""
        return {
            'engine': self.engine,
            'boards_solved': self.boards_solved,
            'boards_unsolved': self.boards_unsolved,
            'cache_hits': self.cache_hits,
            'cache_stats': self.cache_manager.get_stats() if self.cache_manager else None
        }

    def close(self) -> None:
        if self.cache_manager:
            self.cache_manager.close()


def _global_overrides(args) -> List[str]:
    """Overrides given with the global ``--config`` option (space separated)."""
    if getattr(args, 'config', None):
        return args.config.split()
    return []


def _search_overrides(args) -> List[str]:
    overrides = []
    if getattr(args, 'engine', None):
        overrides.append(f"solver.engine={args.engine}")
    if getattr(args, 'workers', None) is not None:
        overrides.append(f"search.parallel.num_workers={args.workers}")
    if getattr(args, 'threshold', None) is not None:
        overrides.append(f"search.astar.heuristic_threshold={args.threshold}")
    if getattr(args, 'max_iterations', None) is not None:
        overrides.append(f"search.astar.max_iterations={args.max_iterations}")
    if getattr(args, 'no_cache', False):
        overrides.append("solver.use_cache=false")
    return overrides


def solve_command(args) -> int:
    """Handle solve command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 solved, 2 no solution, 1 error)
    """
    try:
        config_overrides = _search_overrides(args) + _global_overrides(args)

        logger.info("Initializing slide puzzle solver...")
        solver = SlidePuzzleSolver(config_overrides)

        start_time = time.perf_counter()
        try:
            result = solver.solve_text(args.board)
        finally:
            solver.close()
        total_time = time.perf_counter() - start_time

        if result['error']:
            logger.error(f"Invalid board: {result['error']}")
            return 1

        result['total_time'] = total_time
        result['timestamp'] = time.time()

        if args.output:
            save_results(result, args.output)
            logger.info(f"Results saved to {args.output}")

        print(result['moves'] if result['success'] else UNSOLVABLE)

        if not args.quiet:
            print(f"\nBoard: {result['board']}")
            print(f"Success: {result['success']}")
            if result['success']:
                print(f"Moves: {len(result['moves'])}")
            if result['cached']:
                print("Source: cache")
            else:
                stats = result['search_stats']
                print(f"Termination: {stats.get('termination_reason')}")
                print(f"Nodes expanded: {stats.get('nodes_expanded', 0)}")
            print(f"Computation time: {format_duration(result['computation_time'])}")

        return 0 if result['success'] else EXIT_UNSOLVED

    except Exception as e:
        logger.error(f"Solve command failed: {e}")
        return 1


def batch_command(args) -> int:
    """Handle batch command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    try:
        config_overrides = _search_overrides(args) + _global_overrides(args)

        logger.info("Initializing slide puzzle solver...")
        solver = SlidePuzzleSolver(config_overrides)
        batch_config = solver.config.get('batch', {})

        header_lines = args.header_lines if args.header_lines is not None \
            else batch_config.get('header_lines', 2)
        threads = args.threads if args.threads is not None else batch_config.get('threads', 4)
        answers_path = args.answers or batch_config.get('answers_file', 'answers.txt')

        entries = read_batch(args.input_path, header_lines)
        if not entries:
            logger.error(f"No boards found in {args.input_path}")
            return 1

        logger.info(f"Solving {len(entries)} boards with {threads} threads")

        start_time = time.perf_counter()
        try:
            results = solver.solve_batch(entries, threads=threads)
        finally:
            solver.close()
        total_time = time.perf_counter() - start_time

        write_answers(((r['index'], r['moves'] if r['success'] else None) for r in results),
                      answers_path)

        summary = create_result_summary(results)
        summary.update({
            'batch_settings': {
                'input_path': str(args.input_path),
                'answers_path': str(answers_path),
                'engine': solver.engine,
                'threads': threads,
                'header_lines': header_lines
            },
            'timestamp': time.time(),
            'wall_clock_time': total_time
        })

        if args.output:
            save_results({'summary': summary, 'results': results}, args.output)
            logger.info(f"Results saved to {args.output}")

        if not args.quiet:
            print_summary(summary)
            print(f"\nAnswers written to {answers_path}")

        return 0

    except Exception as e:
        logger.error(f"Batch command failed: {e}")
        return 1


def show_command(args) -> int:
    """Handle show command: draw a board, optionally with per-tile distances."""
    try:
        board = parse_board(args.board)
    except FormatError as e:
        logger.error(f"Invalid board: {e}")
        return 1

    if args.distances:
        heuristic = WallPenaltyHeuristic(canonical_target(board))
        distances = heuristic.distances(board)
        print(render_board(board, distances))
        print(f"Heuristic: {sum(distances)}")
    else:
        print(render_board(board))

    return 0


def verify_command(args) -> int:
    """Handle verify command: replay an answers file against its batch."""
    try:
        entries = read_batch(args.input_path, args.header_lines)
        answers = read_answers(args.answers)
    except (OSError, ValueError) as e:
        logger.error(f"Verify command failed: {e}")
        return 1

    stats = verify_answers(entries, answers)

    if args.output:
        save_results(stats, args.output)

    print(f"Verified: {stats['verified']}/{stats['total']} "
          f"(unsolvable: {stats['unsolvable']}, missing: {stats['missing']}, wrong: {stats['wrong']})")
    if not args.quiet:
        for error in stats['errors']:
            print(f"  {error}")

    return 0 if stats['wrong'] == 0 and stats['missing'] == 0 else EXIT_UNSOLVED


def config_command(args) -> int:
    """Handle config command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    overrides = _global_overrides(args)
    try:
        if args.config_action == 'show':
            manager = ConfigManager()
            manager.load_config(overrides=overrides, validate=False)
            print("Current Configuration:")
            print("=" * 50)
            print(manager.to_yaml())
            return 0

        elif args.config_action == 'validate':
            try:
                config = load_config(overrides=overrides, validate=False)
                validate_config(config)
            except ConfigValidationError as e:
                print(f"❌ Configuration validation failed: {e}")
                return 1
            print("✅ Configuration is valid")
            for issue in check_config_consistency(config):
                print(f"⚠️  {issue}")
            return 0

        elif args.config_action == 'set':
            manager = ConfigManager()
            try:
                # Hydra parses the value and rejects unknown keys
                manager.load_config(overrides=overrides + [f"{args.key}={args.value}"])
            except ConfigValidationError as e:
                print(f"❌ Configuration validation failed: {e}")
                return 1
            destination = Path(args.output) if args.output else manager.config_dir / "config.yaml"
            manager.save_config(destination)
            print(f"{args.key} = {json.dumps(manager.get_parameter(args.key), default=str)} "
                  f"(saved to {destination})")
            return 0

        else:
            print("Unknown config action")
            return 1

    except Exception as e:
        logger.error(f"Config command failed: {e}")
        return 1
