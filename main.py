#!/usr/bin/env python3
"""
Main entry point for the notice board.
"""
from notice_board.interface_adapters.cli import main

if __name__ == '__main__':
    main()
