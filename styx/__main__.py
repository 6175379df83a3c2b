"""
Punto de entrada: python -m styx
"""

from styx.cli.app import main

if __name__ == "__main__":
    main()
