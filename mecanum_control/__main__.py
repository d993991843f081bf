"""
Main entry point when running the mecanum_control module with python -m.
"""

from .client import run

if __name__ == "__main__":
    run()
