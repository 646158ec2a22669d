# Interactive terminal prompts for the install/uninstall commands
import sys

# ABOUTME: Terminal codes for interactive UI
CLEAR_SCREEN = "\033[2J\033[H"
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
CYAN = "\033[96m"

# ABOUTME: (value, label) pairs; value is returned, label is displayed
Option = tuple[str, str]

KEY_UP = "\x1b[A"
KEY_DOWN = "\x1b[B"
KEY_CTRL_C = "\x03"


def _raw_terminal_available() -> bool:
    """True when stdin is a TTY and termios/tty can be imported."""
    if not sys.stdin.isatty():
        return False
    try:
        import termios  # noqa: F401
        import tty  # noqa: F401
    except ImportError:
        return False
    return True


def _getch() -> str:
    """Get a single key press from stdin, arrow keys as one escape sequence."""
    import termios
    import tty

    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = sys.stdin.read(1)
        if ch == "\x1b":
            ch += sys.stdin.read(2)
        return ch
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def _read_line() -> str | None:
    """Read one line of input; None on end of input."""
    line = sys.stdin.readline()
    if not line:
        return None
    return line.strip()


def multi_select(title: str, options: list[Option], preselected: set[str]) -> list[str] | None:
    """Terminal-based multi-select without external dependencies.

    ABOUTME: Arrow keys, space and enter on a TTY; numbered input otherwise
    ABOUTME: Result keeps option order regardless of toggle order

    Args:
        title: Heading shown above the options
        options: (value, label) pairs to choose from
        preselected: Values that start selected

    Returns:
        Selected values, or None if the user cancelled
    """
    if not options:
        return []

    values = [value for value, _label in options]
    selected: set[str] = set(preselected) & set(values)

    if not _raw_terminal_available():
        return _multi_select_fallback(title, options, selected)

    current_idx = 0
    while True:
        print(CLEAR_SCREEN, end="")
        print(f"{BOLD}{title}{RESET}")
        print()

        for idx, (value, label) in enumerate(options):
            prefix = f"{GREEN}[x]{RESET}" if value in selected else "[ ]"
            cursor = f"{CYAN}>>>{RESET} " if idx == current_idx else "    "
            print(f"{cursor}{prefix} {label}")

        print()
        print("Use arrow keys to navigate, space to toggle, enter to confirm.")

        ch = _getch()

        if ch == KEY_UP:
            current_idx = (current_idx - 1) % len(options)
        elif ch == KEY_DOWN:
            current_idx = (current_idx + 1) % len(options)
        elif ch == " ":
            current_value = values[current_idx]
            if current_value in selected:
                selected.remove(current_value)
            else:
                selected.add(current_value)
        elif ch == "a":
            selected = set() if selected == set(values) else set(values)
        elif ch in ("\r", "\n"):
            break
        elif ch in (KEY_CTRL_C, "q"):
            print(CLEAR_SCREEN, end="")
            return None

    print(CLEAR_SCREEN, end="")
    return [value for value in values if value in selected]


def _multi_select_fallback(title: str, options: list[Option], selected: set[str]) -> list[str] | None:
    """Numbered multi-select for terminals without raw mode (Windows, pipes)."""
    print(f"{BOLD}{title}{RESET}")
    print()
    for idx, (value, label) in enumerate(options):
        status = " [preselected]" if value in selected else ""
        print(f"  {idx + 1}. {label}{status}")

    print()
    print("Enter comma-separated numbers (e.g., 1,3,5) or press Enter for defaults:")
    user_input = _read_line()
    if user_input is None:
        return None

    values = [value for value, _label in options]
    if user_input:
        chosen: set[str] = set()
        try:
            for num_str in user_input.split(","):
                idx = int(num_str.strip()) - 1
                if 0 <= idx < len(values):
                    chosen.add(values[idx])
        except ValueError:
            print("Invalid input. Using defaults.")
        else:
            selected = chosen

    return [value for value in values if value in selected]


def select_one(title: str, options: list[Option], default: int = 0) -> str | None:
    """Pick exactly one option.

    Returns:
        The chosen value, or None if the user cancelled
    """
    if not options:
        return None

    current_idx = default if 0 <= default < len(options) else 0

    if not _raw_terminal_available():
        print(f"{BOLD}{title}{RESET}")
        for idx, (_value, label) in enumerate(options):
            marker = " (default)" if idx == current_idx else ""
            print(f"  {idx + 1}. {label}{marker}")
        print(f"Enter a number [{current_idx + 1}]:")

        user_input = _read_line()
        if user_input is None:
            return None
        if user_input:
            try:
                idx = int(user_input) - 1
            except ValueError:
                print("Invalid input. Using default.")
            else:
                if 0 <= idx < len(options):
                    current_idx = idx
        return options[current_idx][0]

    while True:
        print(CLEAR_SCREEN, end="")
        print(f"{BOLD}{title}{RESET}")
        print()
        for idx, (_value, label) in enumerate(options):
            cursor = f"{CYAN}>>>{RESET} " if idx == current_idx else "    "
            print(f"{cursor}{label}")
        print()
        print("Use arrow keys to navigate, enter to confirm.")

        ch = _getch()
        if ch == KEY_UP:
            current_idx = (current_idx - 1) % len(options)
        elif ch == KEY_DOWN:
            current_idx = (current_idx + 1) % len(options)
        elif ch in ("\r", "\n"):
            print(CLEAR_SCREEN, end="")
            return options[current_idx][0]
        elif ch in (KEY_CTRL_C, "q"):
            print(CLEAR_SCREEN, end="")
            return None


def confirm(question: str, default: bool = False) -> bool:
    """Ask a yes/no question; end of input counts as the default."""
    hint = "[Y/n]" if default else "[y/N]"
    print(f"{question} {hint} ", end="", flush=True)

    answer = _read_line()
    if not answer:
        return default
    return answer.lower() in ("y", "yes")
