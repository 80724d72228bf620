"""
Entry point for running coursetree as a module.

Usage:
    python -m coursetree validate content/courses
"""

from coursetree.cli.main import run

if __name__ == "__main__":
    run()
