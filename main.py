"""
Run a CHIP-8 ROM in a pygame window: python main.py path/to/rom.ch8
"""

import sys

from chip8vm.host import main

if __name__ == "__main__":
    sys.exit(main())
