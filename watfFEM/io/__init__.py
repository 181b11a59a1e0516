"""
Input/output: text problem reader, result writer, solver configuration.
"""

from .config import SolverConfig, load_config, save_config
from .reader import read_problem, parse_problem
from .writer import write_results, read_results, format_results
