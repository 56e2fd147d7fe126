"""
ANSI color codes for terminal output
"""


class Colors:
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    PURPLE = '\033[35m'
    CYAN = '\033[36m'
    BRIGHT_RED = '\033[91m'
    BRIGHT_GREEN = '\033[92m'
    SALMON = '\033[38;5;210m'
    BOLD = '\033[1m'
    NC = '\033[0m'  # No Color
