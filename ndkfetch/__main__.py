"""
Entry point for running the ndkfetch CLI as a module.

Usage: python -m ndkfetch [command] [options]
"""

from ndkfetch.cli.parser import main

if __name__ == "__main__":
    main()
