#!/usr/bin/env python3
"""Convenience runner for the stage route extractor.

Usage:
    python run.py 6 -o ./gpx
    python run.py --all
"""
import sys

from route_extractor.main import main

if __name__ == "__main__":
    sys.exit(main())
