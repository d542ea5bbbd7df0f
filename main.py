#!/usr/bin/env python3
"""
SmarterU client
Main entry point for the CLI application
"""

from smarteru.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
