"""Allow ``python -m entrylaunch <module> [args...]``."""

from entrylaunch.cli import app

if __name__ == "__main__":
    app(prog_name="entrylaunch")
