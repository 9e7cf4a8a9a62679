"""
Lint script runner.

Runs flake8 and then pylint over the package and the launcher, stopping at the first
tool that reports problems.
"""
import subprocess
import sys

TARGETS = ["./tailcall", "./tco.py"]
MAX_LINE_LENGTH = "110"

CHECKS = [
    ("flake8", ["--exclude=tailcall/tests", f"--max-line-length={MAX_LINE_LENGTH}"]),
    ("pylint", ["--ignore=tests", f"--max-line-length={MAX_LINE_LENGTH}"]),
]


def main() -> int:
    """
    Lint the tailcall sources, returning the exit code of the first failing tool.
    """
    for tool, options in CHECKS:
        print(f"Running {tool}...")
        result = subprocess.run([tool, *TARGETS, *options], check=False)
        if result.returncode != 0:
            return result.returncode
    return 0


if __name__ == "__main__":
    sys.exit(main())
