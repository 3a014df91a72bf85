#!/usr/bin/env python3
"""
Main entry point for the ChanFix service
"""

from chanfix.main import run

if __name__ == "__main__":
    run()
