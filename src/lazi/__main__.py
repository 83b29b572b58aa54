"""Allow ``python -m lazi``; batch steps re-enter the CLI this way."""

from lazi.cli import main

if __name__ == "__main__":
    main()
