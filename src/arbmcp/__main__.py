# Allow running as `python -m arbmcp`
from arbmcp.cli import run

if __name__ == "__main__":
    run()
