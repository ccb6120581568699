"""
Run with: python -m partitionlayout
"""
import sys

from partitionlayout.main import main

if __name__ == "__main__":
    sys.exit(main())
