#!/usr/bin/env python3
"""
Leverage rebalance engine
Entry point: python -m leverage_engine.main plan
"""
from .cli import main

if __name__ == "__main__":
    main()
