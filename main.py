# main.py
import sys

from joker_odds.cli import main


if __name__ == '__main__':
    sys.exit(main())
